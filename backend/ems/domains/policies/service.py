from __future__ import annotations

from datetime import date
from typing import Any

from sqlalchemy.orm import Session

from ems.core.config import settings
from ems.core.errors import NotFoundError, ValidationError
from ems.core.logging import get_logger
from ems.db.session import transaction
from ems.models import EmployeeAssignment, EmployeeDetails, LeavePolicy, OvertimeEntry, OvertimePolicy, TaxPolicy

logger = get_logger(__name__)

POLICY_LABELS = {
    OvertimePolicy: "Overtime policy",
    LeavePolicy: "Leave policy",
    TaxPolicy: "Tax deduction policy",
}
OVERTIME_STATUSES = ("pending", "approved", "rejected")


def find_policy(db: Session, model, company_id: int | None = None):
    company_id = company_id or settings.company_id
    return db.query(model).filter(model.company_id == company_id).one_or_none()


def get_policy(db: Session, model, company_id: int | None = None):
    policy = find_policy(db, model, company_id)
    if policy is None:
        raise NotFoundError(f"{POLICY_LABELS[model]} not found")
    return policy


def _save_policy(db: Session, model, values: dict[str, Any], updated_by: int | None, company_id: int | None):
    company_id = company_id or settings.company_id
    policy = find_policy(db, model, company_id)
    with transaction(db):
        if policy is None:
            policy = model(company_id=company_id)
            db.add(policy)
        for field, value in values.items():
            setattr(policy, field, value)
        policy.updated_by = updated_by
    db.refresh(policy)
    logger.info("policy_updated", policy=model.__tablename__, company_id=company_id, updated_by=updated_by)
    return policy


def update_overtime_policy(
    db: Session,
    *,
    overtime_allowed: bool,
    bonus_enabled: bool,
    bonus_rate: float,
    updated_by: int | None = None,
    company_id: int | None = None,
) -> OvertimePolicy:
    if not 0 <= bonus_rate <= 10:
        raise ValidationError("Bonus rate must be between 0 and 10")
    values = {"overtime_allowed": overtime_allowed, "bonus_enabled": bonus_enabled, "bonus_rate": bonus_rate}
    return _save_policy(db, OvertimePolicy, values, updated_by, company_id)


def update_leave_policy(
    db: Session,
    *,
    salary_deduction_enabled: bool,
    max_allowed_leaves_per_month: int,
    max_allowed_leaves_per_year: int,
    deduction_rate: float,
    updated_by: int | None = None,
    company_id: int | None = None,
) -> LeavePolicy:
    if max_allowed_leaves_per_month < 0 or max_allowed_leaves_per_year < 0:
        raise ValidationError("Leave limits cannot be negative")
    if not 0 <= deduction_rate <= 1:
        raise ValidationError("Deduction rate must be between 0 and 1")
    values = {
        "salary_deduction_enabled": salary_deduction_enabled,
        "max_allowed_leaves_per_month": max_allowed_leaves_per_month,
        "max_allowed_leaves_per_year": max_allowed_leaves_per_year,
        "deduction_rate": deduction_rate,
    }
    return _save_policy(db, LeavePolicy, values, updated_by, company_id)


def update_tax_policy(
    db: Session,
    *,
    tax_enabled: bool,
    tax_rate: float,
    tax_exemption_limit: float,
    updated_by: int | None = None,
    company_id: int | None = None,
) -> TaxPolicy:
    if not 0 <= tax_rate <= 100:
        raise ValidationError("Tax rate must be between 0 and 100")
    if tax_exemption_limit < 0:
        raise ValidationError("Tax exemption limit cannot be negative")
    values = {"tax_enabled": tax_enabled, "tax_rate": tax_rate, "tax_exemption_limit": tax_exemption_limit}
    return _save_policy(db, TaxPolicy, values, updated_by, company_id)


def add_overtime(
    db: Session,
    *,
    employee_id: int,
    day: date,
    overtime_hours: float,
    notes: str | None = None,
) -> OvertimeEntry:
    if not 0 <= overtime_hours <= 24:
        raise ValidationError("Overtime hours must be between 0 and 24")
    policy = find_policy(db, OvertimePolicy)
    if policy is None or not policy.overtime_allowed:
        raise ValidationError("Overtime is not allowed by the current policy")
    if db.get(EmployeeAssignment, employee_id) is None:
        raise NotFoundError("Employee not found")

    entry = OvertimeEntry(employee_id=employee_id, date=day, overtime_hours=overtime_hours, notes=notes)
    with transaction(db):
        db.add(entry)
    db.refresh(entry)
    logger.info("overtime_recorded", overtime_id=entry.id, employee_id=employee_id, hours=overtime_hours)
    return entry


def update_overtime_status(db: Session, overtime_id: int, status: str, notes: str | None = None) -> OvertimeEntry:
    if status not in OVERTIME_STATUSES:
        raise ValidationError("Invalid status. Must be approved, rejected, or pending")
    entry = db.get(OvertimeEntry, overtime_id)
    if entry is None:
        raise NotFoundError("Overtime entry not found")
    with transaction(db):
        entry.status = status
        if notes is not None:
            entry.notes = notes
    db.refresh(entry)
    return entry


def list_overtime(db: Session, start_date: date | None = None, end_date: date | None = None) -> list[dict[str, Any]]:
    query = (
        db.query(OvertimeEntry, EmployeeDetails)
        .join(EmployeeAssignment, EmployeeAssignment.id == OvertimeEntry.employee_id)
        .join(EmployeeDetails, EmployeeDetails.id == EmployeeAssignment.detail_id)
    )
    if start_date is not None:
        query = query.filter(OvertimeEntry.date >= start_date)
    if end_date is not None:
        query = query.filter(OvertimeEntry.date <= end_date)
    return [
        {
            "id": entry.id,
            "employee_id": entry.employee_id,
            "employee_name": details.name,
            "date": entry.date,
            "overtime_hours": float(entry.overtime_hours),
            "status": entry.status,
            "notes": entry.notes,
        }
        for entry, details in query.order_by(OvertimeEntry.date.desc(), OvertimeEntry.id.desc()).all()
    ]
