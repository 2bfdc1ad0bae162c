from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ems.core.errors import NotFoundError, ValidationError, classify_integrity_error
from ems.core.logging import get_logger
from ems.core.security import hash_password
from ems.core.timeofday import DEFAULT_WORK_END, DEFAULT_WORK_START, parse_time_of_day
from ems.db.session import transaction
from ems.models import (
    Department,
    Designation,
    EmployeeAssignment,
    EmployeeDetails,
    Role,
    Section,
    User,
)
from ems.models.employee import STATUS_ACTIVE, STATUS_UNASSIGNED

logger = get_logger(__name__)

DEFAULT_SALARY = Decimal("50000.00")
DEFAULT_BONUS = Decimal("0.00")

DUPLICATE_EMPLOYEE = "Employee with this CNIC or email already exists"
EMPLOYEE_IN_USE = "Employee still has attendance, leave or overtime records"

ASSIGNMENT_FIELDS = (
    "section_id",
    "designation_id",
    "employment_type",
    "work_start_time",
    "work_end_time",
    "salary",
    "bonus",
)
PERSONAL_FIELDS = ("name", "email")


def username_from_email(email: str) -> str:
    return email.split("@", 1)[0]


def _employee_query(db: Session):
    return (
        db.query(EmployeeDetails, EmployeeAssignment, Section, Department, Designation, Role)
        .outerjoin(EmployeeAssignment, EmployeeAssignment.detail_id == EmployeeDetails.id)
        .outerjoin(Section, Section.id == EmployeeAssignment.section_id)
        .outerjoin(Department, Department.id == Section.department_id)
        .outerjoin(Designation, Designation.id == EmployeeAssignment.designation_id)
        .outerjoin(Role, Role.id == Designation.role_id)
    )


def _employee_row(details, assignment, section, department, designation, role) -> dict[str, Any]:
    row = {
        "detail_id": details.id,
        "emp_id": None,
        "assigned": assignment is not None,
        "name": details.name,
        "national_id": details.national_id,
        "start_date": details.start_date,
        "email": details.email,
        "barcode": details.barcode,
        "status": STATUS_UNASSIGNED,
        "employment_type": None,
        "section_id": None,
        "section_name": None,
        "department_id": None,
        "department_name": None,
        "designation_id": None,
        "designation_title": None,
        "role_id": None,
        "role_name": None,
        "work_start_time": None,
        "work_end_time": None,
        "salary": None,
        "bonus": None,
    }
    if assignment is None:
        return row

    row.update(
        emp_id=assignment.id,
        status=assignment.status,
        employment_type=assignment.employment_type,
        section_id=assignment.section_id,
        section_name=section.name if section else None,
        department_id=department.id if department else None,
        department_name=department.name if department else None,
        designation_id=assignment.designation_id,
        designation_title=designation.title if designation else None,
        role_id=role.id if role else None,
        role_name=role.name if role else None,
        work_start_time=assignment.work_start_time,
        work_end_time=assignment.work_end_time,
        salary=float(assignment.salary),
        bonus=float(assignment.bonus),
    )
    return row


def list_employees(db: Session, unassigned_only: bool = False) -> list[dict[str, Any]]:
    query = _employee_query(db)
    if unassigned_only:
        query = query.filter(EmployeeAssignment.id.is_(None))
    rows = query.order_by(EmployeeDetails.name.asc(), EmployeeDetails.id.asc()).all()
    return [_employee_row(*row) for row in rows]


def get_employee(db: Session, detail_id: int) -> dict[str, Any]:
    row = _employee_query(db).filter(EmployeeDetails.id == detail_id).one_or_none()
    if row is None:
        raise NotFoundError("Employee not found")
    return _employee_row(*row)


def find_employee_by_email(db: Session, email: str) -> dict[str, Any] | None:
    row = (
        _employee_query(db)
        .filter(func.lower(EmployeeDetails.email) == email.strip().lower())
        .order_by(EmployeeDetails.id.asc())
        .first()
    )
    return _employee_row(*row) if row else None


def _check_references(
    db: Session,
    section_id: int | None = None,
    designation_id: int | None = None,
    role_id: int | None = None,
) -> None:
    if section_id is not None and db.get(Section, section_id) is None:
        raise ValidationError(f"Section {section_id} does not exist")
    if designation_id is not None and db.get(Designation, designation_id) is None:
        raise ValidationError(f"Designation {designation_id} does not exist")
    if role_id is not None and db.get(Role, role_id) is None:
        raise ValidationError(f"Role {role_id} does not exist")


def _new_assignment(
    detail_id: int,
    section_id: int,
    designation_id: int,
    employment_type: str | None = None,
    work_start_time: Any = None,
    work_end_time: Any = None,
    salary: Decimal | float | None = None,
    bonus: Decimal | float | None = None,
) -> EmployeeAssignment:
    return EmployeeAssignment(
        detail_id=detail_id,
        section_id=section_id,
        designation_id=designation_id,
        employment_type=employment_type or "editable",
        work_start_time=parse_time_of_day(work_start_time, DEFAULT_WORK_START),
        work_end_time=parse_time_of_day(work_end_time, DEFAULT_WORK_END),
        salary=DEFAULT_SALARY if salary is None else salary,
        bonus=DEFAULT_BONUS if bonus is None else bonus,
        status=STATUS_ACTIVE,
    )


def add_employee(
    db: Session,
    *,
    name: str,
    national_id: str,
    start_date: date,
    email: str,
    password: str | None = None,
    section_id: int | None = None,
    designation_id: int | None = None,
    employment_type: str | None = None,
    work_start_time: Any = None,
    work_end_time: Any = None,
    salary: Decimal | float | None = None,
    bonus: Decimal | float | None = None,
) -> tuple[EmployeeDetails, EmployeeAssignment | None]:
    """Create the identity record, plus the assignment and login when supplied.

    All inserts share one transaction: a duplicate CNIC or email leaves
    nothing behind.
    """
    name = (name or "").strip()
    national_id = (national_id or "").strip()
    email = (email or "").strip()
    if not (name and national_id and start_date and email):
        raise ValidationError("name, national_id, start_date and email are required")

    assign = section_id is not None and designation_id is not None
    if assign:
        _check_references(db, section_id=section_id, designation_id=designation_id)

    try:
        with transaction(db):
            details = EmployeeDetails(
                name=name,
                national_id=national_id,
                start_date=start_date,
                email=email,
            )
            db.add(details)
            db.flush()

            assignment = None
            if assign:
                assignment = _new_assignment(
                    details.id,
                    section_id,
                    designation_id,
                    employment_type=employment_type,
                    work_start_time=work_start_time,
                    work_end_time=work_end_time,
                    salary=salary,
                    bonus=bonus,
                )
                db.add(assignment)
                db.flush()

            if password:
                db.add(
                    User(
                        username=username_from_email(details.email),
                        email=details.email,
                        hashed_password=hash_password(password),
                        role="Employee",
                    )
                )
                db.flush()
    except IntegrityError as exc:
        logger.info("employee_create_rejected", email=email, error=str(exc.orig))
        raise classify_integrity_error(exc, duplicate=DUPLICATE_EMPLOYEE) from exc

    db.refresh(details)
    if assignment is not None:
        db.refresh(assignment)
    logger.info(
        "employee_created",
        detail_id=details.id,
        assignment_id=assignment.id if assignment else None,
        credentials=bool(password),
    )
    return details, assignment


def assign_employee(
    db: Session,
    detail_id: int,
    *,
    section_id: int,
    designation_id: int,
    role_id: int,
    employment_type: str | None = None,
    work_start_time: Any = None,
    work_end_time: Any = None,
    salary: Decimal | float | None = None,
    bonus: Decimal | float | None = None,
) -> EmployeeAssignment:
    details = db.get(EmployeeDetails, detail_id)
    if details is None:
        raise NotFoundError("Employee not found")
    if details.assignment is not None:
        raise ValidationError("Employee is already assigned")
    _check_references(db, section_id=section_id, designation_id=designation_id, role_id=role_id)

    assignment = _new_assignment(
        detail_id,
        section_id,
        designation_id,
        employment_type=employment_type,
        work_start_time=work_start_time,
        work_end_time=work_end_time,
        salary=salary,
        bonus=bonus,
    )
    try:
        with transaction(db):
            db.add(assignment)
            db.flush()
            assignment.status = STATUS_ACTIVE
    except IntegrityError as exc:
        raise classify_integrity_error(exc, duplicate="Employee is already assigned") from exc

    db.refresh(assignment)
    logger.info("employee_assigned", detail_id=detail_id, assignment_id=assignment.id)
    return assignment


def update_assignment(db: Session, assignment_id: int, changes: dict[str, Any]) -> EmployeeAssignment:
    """Apply only the supplied assignment fields, then mark the row Active."""
    changes = {key: value for key, value in changes.items() if key in ASSIGNMENT_FIELDS}
    if not changes:
        raise ValidationError("No assignment fields supplied")

    assignment = db.get(EmployeeAssignment, assignment_id)
    if assignment is None:
        raise NotFoundError("Employee not found")
    _check_references(
        db,
        section_id=changes.get("section_id"),
        designation_id=changes.get("designation_id"),
    )

    with transaction(db):
        for field, value in changes.items():
            if value is None:
                continue
            if field == "work_start_time":
                value = parse_time_of_day(value, DEFAULT_WORK_START)
            elif field == "work_end_time":
                value = parse_time_of_day(value, DEFAULT_WORK_END)
            setattr(assignment, field, value)
        db.flush()
        assignment.status = STATUS_ACTIVE

    db.refresh(assignment)
    logger.info("employee_assignment_updated", assignment_id=assignment_id, fields=sorted(changes))
    return assignment


def update_personal_info(db: Session, detail_id: int, changes: dict[str, Any]) -> EmployeeDetails:
    changes = {
        key: value.strip() for key, value in changes.items() if key in PERSONAL_FIELDS and value and value.strip()
    }
    details = db.get(EmployeeDetails, detail_id)
    if details is None:
        raise NotFoundError("Employee not found")

    name = changes.get("name")
    if (
        name is not None
        and name.strip() != details.name
        and details.assignment is not None
        and details.assignment.employment_type == "fixed"
    ):
        raise ValidationError("Fixed employee name cannot be changed")

    try:
        with transaction(db):
            if name is not None:
                details.name = name.strip()
            email = changes.get("email")
            if email is not None and email.strip() != details.email:
                # Credentials are located by email when the employee is removed.
                db.query(User).filter(User.email == details.email).update(
                    {User.email: email.strip()}, synchronize_session=False
                )
                details.email = email.strip()
            db.flush()
    except IntegrityError as exc:
        raise classify_integrity_error(exc, duplicate="Email is already in use") from exc

    db.refresh(details)
    logger.info("employee_details_updated", detail_id=detail_id, fields=sorted(changes))
    return details


def delete_employee(
    db: Session,
    *,
    assignment_id: int | None = None,
    detail_id: int | None = None,
) -> dict[str, Any]:
    """Remove credentials, assignment and identity record, in that order."""
    if assignment_id is not None:
        assignment = db.get(EmployeeAssignment, assignment_id)
        if assignment is None:
            raise NotFoundError("Employee not found")
        details = assignment.details
    elif detail_id is not None:
        details = db.get(EmployeeDetails, detail_id)
        if details is None:
            raise NotFoundError("Employee not found")
        assignment = details.assignment
    else:
        raise ValidationError("An assignment id or detail id is required")

    details_id = details.id
    email = details.email
    removed_assignment = assignment.id if assignment is not None else None
    try:
        with transaction(db):
            db.query(User).filter(User.email == email).delete(synchronize_session=False)
            if assignment is not None:
                db.query(EmployeeAssignment).filter(EmployeeAssignment.id == assignment.id).delete(
                    synchronize_session=False
                )
            db.query(EmployeeDetails).filter(EmployeeDetails.id == details_id).delete(
                synchronize_session=False
            )
    except IntegrityError as exc:
        raise classify_integrity_error(exc, dependency=EMPLOYEE_IN_USE) from exc

    logger.info("employee_deleted", detail_id=details_id, assignment_id=removed_assignment)
    return {"detail_id": details_id, "assignment_id": removed_assignment, "email": email}
