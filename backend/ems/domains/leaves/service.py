"""Leave applications.

``pending`` is the initial state. ``approved`` and ``rejected`` are final:
re-stating the same decision is accepted, changing it is not. ``viewed`` only
records that an approver opened the application and may still be decided.
Only undecided applications can be withdrawn, and only by their applicant.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from ems.core.errors import NotFoundError, ValidationError
from ems.core.logging import get_logger
from ems.db.session import transaction
from ems.models import Department, Designation, EmployeeAssignment, EmployeeDetails, LeaveApplication, Section
from ems.models.leave import LEAVE_DECISIONS, LEAVE_PENDING, LEAVE_TYPES

logger = get_logger(__name__)

FINAL_STATUSES = ("approved", "rejected")
WITHDRAWABLE_STATUSES = (LEAVE_PENDING, "viewed")


def days_requested(start_date: date, end_date: date) -> int:
    """Inclusive day count."""
    return (end_date - start_date).days + 1


def _leave_query(db: Session):
    return (
        db.query(LeaveApplication, EmployeeDetails, Department, Designation)
        .join(EmployeeAssignment, EmployeeAssignment.id == LeaveApplication.employee_id)
        .join(EmployeeDetails, EmployeeDetails.id == EmployeeAssignment.detail_id)
        .join(Section, Section.id == EmployeeAssignment.section_id)
        .join(Department, Department.id == Section.department_id)
        .join(Designation, Designation.id == EmployeeAssignment.designation_id)
    )


def _leave_row(leave: LeaveApplication, details, department, designation) -> dict[str, Any]:
    return {
        "id": leave.id,
        "employee_id": leave.employee_id,
        "employee_name": details.name,
        "department_name": department.name,
        "designation_title": designation.title,
        "leave_type": leave.leave_type,
        "start_date": leave.start_date,
        "end_date": leave.end_date,
        "days_requested": leave.days_requested,
        "reason": leave.reason,
        "status": leave.status,
        "applied_date": leave.applied_date,
        "approved_by": leave.approved_by,
        "approved_date": leave.approved_date,
        "comments": leave.comments,
    }


def apply_leave(
    db: Session,
    *,
    employee_id: int,
    leave_type: str,
    start_date: date,
    end_date: date,
    reason: str,
) -> LeaveApplication:
    if not (employee_id and leave_type and start_date and end_date and reason and reason.strip()):
        raise ValidationError("All fields are required: employee_id, leave_type, start_date, end_date, reason")
    if leave_type not in LEAVE_TYPES:
        raise ValidationError("Invalid leave type. Must be either short_leave or holiday")
    if end_date < start_date:
        raise ValidationError("End date cannot be before start date")
    if db.get(EmployeeAssignment, employee_id) is None:
        raise NotFoundError("Employee not found")

    leave = LeaveApplication(
        employee_id=employee_id,
        leave_type=leave_type,
        start_date=start_date,
        end_date=end_date,
        days_requested=days_requested(start_date, end_date),
        reason=reason.strip(),
        status=LEAVE_PENDING,
    )
    with transaction(db):
        db.add(leave)
    db.refresh(leave)
    logger.info("leave_applied", leave_id=leave.id, employee_id=employee_id, days=leave.days_requested)
    return leave


def list_leaves(db: Session, status: str | None = None, employee_id: int | None = None) -> list[dict[str, Any]]:
    query = _leave_query(db)
    if status:
        query = query.filter(LeaveApplication.status == status)
    if employee_id is not None:
        query = query.filter(LeaveApplication.employee_id == employee_id)
    rows = query.order_by(LeaveApplication.applied_date.desc(), LeaveApplication.id.desc()).all()
    return [_leave_row(*row) for row in rows]


def get_leave(db: Session, leave_id: int) -> dict[str, Any]:
    row = _leave_query(db).filter(LeaveApplication.id == leave_id).one_or_none()
    if row is None:
        raise NotFoundError("Leave application not found")
    return _leave_row(*row)


def leave_stats(db: Session, start_date: date | None = None, end_date: date | None = None) -> dict[str, int]:
    query = db.query(LeaveApplication.status, func.count(LeaveApplication.id), func.sum(LeaveApplication.days_requested))
    if start_date is not None:
        query = query.filter(LeaveApplication.start_date >= start_date)
    if end_date is not None:
        query = query.filter(LeaveApplication.end_date <= end_date)

    stats = {"total": 0, "pending": 0, "approved": 0, "rejected": 0, "viewed": 0, "approved_days": 0}
    for status, count, days in query.group_by(LeaveApplication.status).all():
        stats["total"] += count
        if status in stats:
            stats[status] = count
        if status == "approved":
            stats["approved_days"] = int(days or 0)
    return stats


def update_status(
    db: Session,
    leave_id: int,
    *,
    status: str,
    approved_by: int,
    comments: str | None = None,
) -> LeaveApplication:
    if status not in LEAVE_DECISIONS:
        raise ValidationError("Invalid status. Must be approved, rejected, or viewed")

    leave = db.get(LeaveApplication, leave_id)
    if leave is None:
        raise NotFoundError("Leave application not found")
    if leave.status in FINAL_STATUSES:
        if status != leave.status:
            raise ValidationError(f"Leave application is already {leave.status}")
        return leave

    with transaction(db):
        leave.status = status
        leave.approved_by = approved_by
        leave.approved_date = datetime.utcnow()
        if comments is not None:
            leave.comments = comments
    db.refresh(leave)
    logger.info("leave_status_updated", leave_id=leave_id, status=status, approved_by=approved_by)
    return leave


def delete_leave(db: Session, leave_id: int, employee_id: int) -> None:
    leave = db.get(LeaveApplication, leave_id)
    if leave is None:
        raise NotFoundError("Leave application not found")
    if leave.employee_id != employee_id:
        raise ValidationError("Leave application belongs to another employee")
    if leave.status not in WITHDRAWABLE_STATUSES:
        raise ValidationError(f"Cannot delete a leave application that is {leave.status}")

    with transaction(db):
        db.delete(leave)
    logger.info("leave_deleted", leave_id=leave_id, employee_id=employee_id)
