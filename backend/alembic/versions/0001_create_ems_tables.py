"""create ems tables

Revision ID: 0001
Revises: None
Create Date: 2025-06-01
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def policy_audit_columns():
    return [
        sa.Column("updated_by", sa.Integer(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=100), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="Employee"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=False)

    op.create_table(
        "departments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_departments_id"), "departments", ["id"], unique=False)

    op.create_table(
        "sections",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("department_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["department_id"], ["departments.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_sections_id"), "sections", ["id"], unique=False)

    op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_roles_id"), "roles", ["id"], unique=False)

    op.create_table(
        "designations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("role_id", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_designations_id"), "designations", ["id"], unique=False)

    op.create_table(
        "employee_details",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("national_id", sa.String(length=15), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("email", sa.String(length=100), nullable=False),
        sa.Column("barcode", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("national_id"),
        sa.UniqueConstraint("email"),
        sa.UniqueConstraint("barcode"),
    )
    op.create_index(op.f("ix_employee_details_id"), "employee_details", ["id"], unique=False)

    op.create_table(
        "employee_assignments",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("detail_id", sa.Integer(), nullable=False),
        sa.Column("section_id", sa.Integer(), nullable=False),
        sa.Column("designation_id", sa.Integer(), nullable=False),
        sa.Column("employment_type", sa.String(length=10), nullable=False, server_default="editable"),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="Active"),
        sa.Column("work_start_time", sa.Time(), nullable=False, server_default="09:00:00"),
        sa.Column("work_end_time", sa.Time(), nullable=False, server_default="17:00:00"),
        sa.Column("salary", sa.Numeric(12, 2), nullable=False, server_default="50000"),
        sa.Column("bonus", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["detail_id"], ["employee_details.id"]),
        sa.ForeignKeyConstraint(["section_id"], ["sections.id"]),
        sa.ForeignKeyConstraint(["designation_id"], ["designations.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("detail_id"),
    )
    op.create_index(op.f("ix_employee_assignments_id"), "employee_assignments", ["id"], unique=False)

    op.create_table(
        "attendance",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("check_in", sa.Time(), nullable=True),
        sa.Column("check_out", sa.Time(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("hours_worked", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column("notes", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["employee_id"], ["employee_assignments.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )
    op.create_index(op.f("ix_attendance_id"), "attendance", ["id"], unique=False)

    op.create_table(
        "leave_applications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("leave_type", sa.String(length=20), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("days_requested", sa.Integer(), nullable=False),
        sa.Column("reason", sa.String(length=500), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("applied_date", sa.DateTime(), nullable=True),
        sa.Column("approved_by", sa.Integer(), nullable=True),
        sa.Column("approved_date", sa.DateTime(), nullable=True),
        sa.Column("comments", sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(["employee_id"], ["employee_assignments.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_leave_applications_id"), "leave_applications", ["id"], unique=False)

    op.create_table(
        "employee_overtime",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("overtime_hours", sa.Numeric(4, 2), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("notes", sa.String(length=500), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["employee_id"], ["employee_assignments.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_employee_overtime_id"), "employee_overtime", ["id"], unique=False)

    op.create_table(
        "overtime_policies",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("overtime_allowed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("bonus_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("bonus_rate", sa.Numeric(5, 2), nullable=False, server_default="1.5"),
        sa.Column("standard_work_hours", sa.Numeric(4, 2), nullable=False, server_default="8"),
        sa.Column("overtime_threshold_minutes", sa.Integer(), nullable=False, server_default="480"),
        *policy_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id"),
    )
    op.create_table(
        "leave_policies",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("salary_deduction_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("max_allowed_leaves_per_month", sa.Integer(), nullable=False, server_default="2"),
        sa.Column("max_allowed_leaves_per_year", sa.Integer(), nullable=False, server_default="24"),
        sa.Column("deduction_rate", sa.Numeric(5, 2), nullable=False, server_default="1"),
        *policy_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id"),
    )
    op.create_table(
        "tax_policies",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("company_id", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("tax_enabled", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("tax_rate", sa.Numeric(5, 2), nullable=False, server_default="5"),
        sa.Column("tax_exemption_limit", sa.Numeric(12, 2), nullable=False, server_default="0"),
        *policy_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("company_id"),
    )
    for table in ("overtime_policies", "leave_policies", "tax_policies"):
        op.create_index(op.f(f"ix_{table}_id"), table, ["id"], unique=False)


def downgrade() -> None:
    for table in ("tax_policies", "leave_policies", "overtime_policies"):
        op.drop_index(op.f(f"ix_{table}_id"), table_name=table)
        op.drop_table(table)
    for table in (
        "employee_overtime",
        "leave_applications",
        "attendance",
        "employee_assignments",
        "employee_details",
        "designations",
        "roles",
        "sections",
        "departments",
    ):
        op.drop_index(op.f(f"ix_{table}_id"), table_name=table)
        op.drop_table(table)
    op.drop_index(op.f("ix_users_username"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
