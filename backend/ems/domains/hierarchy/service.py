"""Departments, sections, designations and roles.

Deleting any node removes every employee attached to it, directly or through
child nodes. The whole cascade is one transaction; there is no mode that
refuses the delete when dependents exist.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ems.core.errors import NotFoundError, ServerError, ValidationError, classify_integrity_error
from ems.core.logging import get_logger
from ems.core.observability import get_tracer
from ems.db.session import transaction
from ems.models import (
    Attendance,
    Department,
    Designation,
    EmployeeAssignment,
    EmployeeDetails,
    LeaveApplication,
    OvertimeEntry,
    Role,
    Section,
    User,
)

logger = get_logger(__name__)
tracer = get_tracer(__name__)

CASCADE_BLOCKED = "Delete blocked by records that still reference it"


@dataclass
class CascadeSummary:
    departments: int = 0
    sections: int = 0
    designations: int = 0
    roles: int = 0
    employees: int = 0
    attendance: int = 0
    leaves: int = 0
    overtime: int = 0
    users: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


def _purge_assignment(db: Session, assignment: EmployeeAssignment, summary: CascadeSummary) -> None:
    """Remove one employee: dependent rows, credentials, assignment, identity."""
    employee_id = assignment.id
    detail_id = assignment.detail_id
    details = db.get(EmployeeDetails, detail_id)

    summary.attendance += (
        db.query(Attendance).filter(Attendance.employee_id == employee_id).delete(synchronize_session=False)
    )
    summary.leaves += (
        db.query(LeaveApplication)
        .filter(LeaveApplication.employee_id == employee_id)
        .delete(synchronize_session=False)
    )
    summary.overtime += (
        db.query(OvertimeEntry).filter(OvertimeEntry.employee_id == employee_id).delete(synchronize_session=False)
    )
    if details is not None:
        summary.users += db.query(User).filter(User.email == details.email).delete(synchronize_session=False)
    db.query(EmployeeAssignment).filter(EmployeeAssignment.id == employee_id).delete(synchronize_session=False)
    db.query(EmployeeDetails).filter(EmployeeDetails.id == detail_id).delete(synchronize_session=False)
    summary.employees += 1


def _purge_assignments(db: Session, summary: CascadeSummary, *criteria) -> None:
    for assignment in db.query(EmployeeAssignment).filter(*criteria).order_by(EmployeeAssignment.id).all():
        _purge_assignment(db, assignment, summary)


def _delete_section_tree(db: Session, section_id: int, summary: CascadeSummary) -> None:
    _purge_assignments(db, summary, EmployeeAssignment.section_id == section_id)
    db.query(Section).filter(Section.id == section_id).delete(synchronize_session=False)
    summary.sections += 1


def _delete_designation_tree(db: Session, designation_id: int, summary: CascadeSummary) -> None:
    _purge_assignments(db, summary, EmployeeAssignment.designation_id == designation_id)
    db.query(Designation).filter(Designation.id == designation_id).delete(synchronize_session=False)
    summary.designations += 1


def _run_cascade(db: Session, node: str, node_id: int, steps) -> CascadeSummary:
    summary = CascadeSummary()
    with tracer.start_as_current_span(f"cascade_delete.{node}") as span:
        span.set_attribute("ems.node_id", node_id)
        try:
            with transaction(db):
                steps(summary)
        except IntegrityError as exc:
            logger.warning("cascade_delete_blocked", node=node, node_id=node_id, error=str(exc.orig))
            raise classify_integrity_error(exc, dependency=CASCADE_BLOCKED) from exc
        except SQLAlchemyError as exc:
            logger.exception("cascade_delete_failed", node=node, node_id=node_id)
            raise ServerError() from exc
        span.set_attribute("ems.employees_removed", summary.employees)

    db.expire_all()
    logger.info("cascade_delete_complete", node=node, node_id=node_id, **summary.as_dict())
    return summary


# Departments

def list_departments(db: Session) -> list[Department]:
    return db.query(Department).order_by(Department.name.asc(), Department.id.asc()).all()


def add_department(db: Session, name: str) -> Department:
    if not name or not name.strip():
        raise ValidationError("Department name is required")
    department = Department(name=name.strip())
    with transaction(db):
        db.add(department)
    db.refresh(department)
    return department


def update_department(db: Session, department_id: int, name: str) -> Department:
    if not name or not name.strip():
        raise ValidationError("Department name is required")
    department = db.get(Department, department_id)
    if department is None:
        raise NotFoundError("Department not found")
    with transaction(db):
        department.name = name.strip()
    db.refresh(department)
    return department


def delete_department(db: Session, department_id: int) -> CascadeSummary:
    if db.get(Department, department_id) is None:
        raise NotFoundError("Department not found")

    def steps(summary: CascadeSummary) -> None:
        section_ids = [
            section_id
            for (section_id,) in db.query(Section.id).filter(Section.department_id == department_id).all()
        ]
        for section_id in section_ids:
            _delete_section_tree(db, section_id, summary)
        db.query(Department).filter(Department.id == department_id).delete(synchronize_session=False)
        summary.departments += 1

    return _run_cascade(db, "department", department_id, steps)


# Sections

def list_sections(db: Session) -> list[tuple[Section, Department]]:
    return (
        db.query(Section, Department)
        .join(Department, Department.id == Section.department_id)
        .order_by(Section.name.asc(), Section.id.asc())
        .all()
    )


def _require_department(db: Session, department_id: int | None) -> None:
    if department_id is None or db.get(Department, department_id) is None:
        raise ValidationError("Section requires an existing department")


def add_section(db: Session, name: str, department_id: int) -> Section:
    if not name or not name.strip():
        raise ValidationError("Section name and department are required")
    _require_department(db, department_id)
    section = Section(name=name.strip(), department_id=department_id)
    with transaction(db):
        db.add(section)
    db.refresh(section)
    return section


def update_section(db: Session, section_id: int, name: str, department_id: int) -> Section:
    if not name or not name.strip():
        raise ValidationError("Section name and department are required")
    section = db.get(Section, section_id)
    if section is None:
        raise NotFoundError("Section not found")
    _require_department(db, department_id)
    with transaction(db):
        section.name = name.strip()
        section.department_id = department_id
    db.refresh(section)
    return section


def delete_section(db: Session, section_id: int) -> CascadeSummary:
    if db.get(Section, section_id) is None:
        raise NotFoundError("Section not found")
    return _run_cascade(
        db, "section", section_id, lambda summary: _delete_section_tree(db, section_id, summary)
    )


# Designations

def list_designations(db: Session) -> list[tuple[Designation, Role | None]]:
    return (
        db.query(Designation, Role)
        .outerjoin(Role, Role.id == Designation.role_id)
        .order_by(Designation.title.asc(), Designation.id.asc())
        .all()
    )


def _check_role(db: Session, role_id: int | None) -> None:
    if role_id is not None and db.get(Role, role_id) is None:
        raise ValidationError(f"Role {role_id} does not exist")


def add_designation(db: Session, title: str, role_id: int | None = None) -> Designation:
    if not title or not title.strip():
        raise ValidationError("Designation title is required")
    _check_role(db, role_id)
    designation = Designation(title=title.strip(), role_id=role_id)
    with transaction(db):
        db.add(designation)
    db.refresh(designation)
    return designation


def update_designation(db: Session, designation_id: int, title: str, role_id: int | None = None) -> Designation:
    if not title or not title.strip():
        raise ValidationError("Designation title is required")
    designation = db.get(Designation, designation_id)
    if designation is None:
        raise NotFoundError("Designation not found")
    _check_role(db, role_id)
    with transaction(db):
        designation.title = title.strip()
        designation.role_id = role_id
    db.refresh(designation)
    return designation


def delete_designation(db: Session, designation_id: int) -> CascadeSummary:
    if db.get(Designation, designation_id) is None:
        raise NotFoundError("Designation not found")
    return _run_cascade(
        db,
        "designation",
        designation_id,
        lambda summary: _delete_designation_tree(db, designation_id, summary),
    )


# Roles

def list_roles(db: Session) -> list[Role]:
    return db.query(Role).order_by(Role.name.asc(), Role.id.asc()).all()


def add_role(db: Session, name: str) -> Role:
    if not name or not name.strip():
        raise ValidationError("Role name is required")
    role = Role(name=name.strip())
    with transaction(db):
        db.add(role)
    db.refresh(role)
    return role


def update_role(db: Session, role_id: int, name: str) -> Role:
    if not name or not name.strip():
        raise ValidationError("Role name is required")
    role = db.get(Role, role_id)
    if role is None:
        raise NotFoundError("Role not found")
    with transaction(db):
        role.name = name.strip()
    db.refresh(role)
    return role


def delete_role(db: Session, role_id: int) -> CascadeSummary:
    if db.get(Role, role_id) is None:
        raise NotFoundError("Role not found")

    def steps(summary: CascadeSummary) -> None:
        designation_ids = [
            designation_id
            for (designation_id,) in db.query(Designation.id).filter(Designation.role_id == role_id).all()
        ]
        for designation_id in designation_ids:
            _delete_designation_tree(db, designation_id, summary)
        db.query(Role).filter(Role.id == role_id).delete(synchronize_session=False)
        summary.roles += 1

    return _run_cascade(db, "role", role_id, steps)
