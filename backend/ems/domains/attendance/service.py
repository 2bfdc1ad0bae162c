from __future__ import annotations

from datetime import date, datetime, time
from typing import Any

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ems.core.errors import AlreadyMarkedError, NotFoundError, ValidationError, classify_integrity_error
from ems.core.logging import get_logger
from ems.core.observability import get_meter
from ems.db.session import transaction
from ems.models import Attendance, Department, Designation, EmployeeAssignment, EmployeeDetails, Section
from ems.models.attendance import ATTENDANCE_STATUSES
from ems.models.employee import STATUS_ACTIVE

logger = get_logger(__name__)
barcode_checkins = get_meter(__name__).create_counter(
    "ems.attendance.barcode_checkins", description="Attendance rows created from barcode scans"
)

BARCODE_NOTE = "Marked via barcode scan"


def _hours_between(check_in: time | None, check_out: time | None) -> float:
    if check_in is None or check_out is None:
        return 0.0
    start = datetime.combine(date.min, check_in)
    end = datetime.combine(date.min, check_out)
    return max(round((end - start).total_seconds() / 3600, 2), 0.0)


def _attendance_query(db: Session):
    return (
        db.query(Attendance, EmployeeDetails, Department, Designation)
        .join(EmployeeAssignment, EmployeeAssignment.id == Attendance.employee_id)
        .join(EmployeeDetails, EmployeeDetails.id == EmployeeAssignment.detail_id)
        .join(Section, Section.id == EmployeeAssignment.section_id)
        .join(Department, Department.id == Section.department_id)
        .join(Designation, Designation.id == EmployeeAssignment.designation_id)
    )


def _attendance_row(record: Attendance, details, department, designation) -> dict[str, Any]:
    return {
        "id": record.id,
        "employee_id": record.employee_id,
        "date": record.date,
        "check_in": record.check_in,
        "check_out": record.check_out,
        "status": record.status,
        "hours_worked": float(record.hours_worked or 0),
        "notes": record.notes,
        "employee_name": details.name,
        "department_name": department.name,
        "designation_title": designation.title,
    }


def list_by_date(db: Session, day: date) -> list[dict[str, Any]]:
    rows = _attendance_query(db).filter(Attendance.date == day).order_by(EmployeeDetails.name.asc()).all()
    return [_attendance_row(*row) for row in rows]


def employee_report(
    db: Session, employee_id: int, start_date: date | None = None, end_date: date | None = None
) -> list[dict[str, Any]]:
    query = _attendance_query(db).filter(Attendance.employee_id == employee_id)
    if start_date is not None:
        query = query.filter(Attendance.date >= start_date)
    if end_date is not None:
        query = query.filter(Attendance.date <= end_date)
    return [_attendance_row(*row) for row in query.order_by(Attendance.date.desc()).all()]


def stats_for_date(db: Session, day: date) -> dict[str, int]:
    def count(status: str):
        return func.coalesce(func.sum(case((Attendance.status == status, 1), else_=0)), 0)

    total, present, absent, late, half_day = (
        db.query(
            func.count(Attendance.id),
            count("Present"),
            count("Absent"),
            count("Late"),
            count("Half Day"),
        )
        .filter(Attendance.date == day)
        .one()
    )
    return {
        "total": int(total),
        "present": int(present),
        "absent": int(absent),
        "late": int(late),
        "half_day": int(half_day),
    }


def add_or_update(
    db: Session,
    *,
    employee_id: int,
    day: date,
    status: str,
    notes: str | None = None,
    check_in: time | None = None,
    check_out: time | None = None,
) -> tuple[str, Attendance]:
    """Upsert keyed by (employee, date). Returns ``("added"|"updated", record)``."""
    if status not in ATTENDANCE_STATUSES:
        raise ValidationError(f"Status must be one of: {', '.join(ATTENDANCE_STATUSES)}")
    if db.get(EmployeeAssignment, employee_id) is None:
        raise NotFoundError("Invalid employee ID. Employee not found in system.")

    record = (
        db.query(Attendance)
        .filter(Attendance.employee_id == employee_id, Attendance.date == day)
        .one_or_none()
    )
    outcome = "updated" if record is not None else "added"
    try:
        with transaction(db):
            if record is None:
                record = Attendance(employee_id=employee_id, date=day)
                db.add(record)
            record.status = status
            record.notes = notes or None
            record.check_in = check_in
            record.check_out = check_out
            record.hours_worked = _hours_between(check_in, check_out)
    except IntegrityError as exc:
        # Lost an insert race for the same (employee, date); not retried.
        raise classify_integrity_error(
            exc, duplicate="Attendance record already exists for this employee on this date"
        ) from exc

    db.refresh(record)
    logger.info("attendance_saved", employee_id=employee_id, date=day.isoformat(), outcome=outcome)
    return outcome, record


def delete_attendance(db: Session, attendance_id: int) -> None:
    record = db.get(Attendance, attendance_id)
    if record is None:
        raise NotFoundError("Attendance record not found")
    with transaction(db):
        db.delete(record)
    logger.info("attendance_deleted", attendance_id=attendance_id)


def find_by_barcode(db: Session, barcode: str, active_only: bool = False):
    query = (
        db.query(EmployeeAssignment, EmployeeDetails)
        .join(EmployeeDetails, EmployeeDetails.id == EmployeeAssignment.detail_id)
        .filter(EmployeeDetails.barcode == barcode)
    )
    if active_only:
        query = query.filter(EmployeeAssignment.status == STATUS_ACTIVE)
    return query.first()


def mark_by_barcode(db: Session, barcode: str, day: date | None = None, now: datetime | None = None) -> dict[str, Any]:
    """Insert a Present record for the scanned employee; never overwrites."""
    now = now or datetime.now()
    day = day or now.date()

    found = find_by_barcode(db, barcode, active_only=True) if barcode else None
    if found is None:
        raise NotFoundError("Employee not found or inactive. Please check the barcode and try again.")
    assignment, details = found

    existing = (
        db.query(Attendance)
        .filter(Attendance.employee_id == assignment.id, Attendance.date == day)
        .one_or_none()
    )
    if existing is not None:
        raise AlreadyMarkedError(
            f"Attendance already marked for {details.name} with status: {existing.status}",
            employee_name=details.name,
            status=existing.status,
        )

    try:
        with transaction(db):
            db.add(
                Attendance(
                    employee_id=assignment.id,
                    date=day,
                    status="Present",
                    check_in=now.time().replace(microsecond=0),
                    notes=BARCODE_NOTE,
                )
            )
    except IntegrityError as exc:
        raise AlreadyMarkedError(
            f"Attendance already marked for {details.name}", employee_name=details.name
        ) from exc

    barcode_checkins.add(1)
    logger.info("barcode_checkin", employee_id=assignment.id, date=day.isoformat())
    return {
        "employee_id": assignment.id,
        "employee_name": details.name,
        "message": f"Attendance successfully marked for {details.name}",
    }
