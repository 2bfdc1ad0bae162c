from __future__ import annotations

import secrets

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ems.core.errors import NotFoundError, classify_integrity_error
from ems.core.logging import get_logger
from ems.db.session import transaction
from ems.models import EmployeeAssignment, EmployeeDetails
from ems.models.employee import STATUS_ACTIVE

logger = get_logger(__name__)

BARCODE_TAKEN = "This barcode is already assigned to another employee"


def barcode_candidate(assignment_id: int) -> str:
    return f"EMP{assignment_id:03d}{secrets.randbelow(10_000):04d}"


def _barcode_in_use(db: Session, barcode: str, exclude_detail_id: int | None = None) -> bool:
    query = db.query(EmployeeDetails.id).filter(EmployeeDetails.barcode == barcode)
    if exclude_detail_id is not None:
        query = query.filter(EmployeeDetails.id != exclude_detail_id)
    return query.first() is not None


def generate_barcode(db: Session, detail_id: int) -> str:
    details = db.get(EmployeeDetails, detail_id)
    if details is None or details.assignment is None:
        raise NotFoundError("Employee not found")

    barcode = barcode_candidate(details.assignment.id)
    while _barcode_in_use(db, barcode):
        barcode = barcode_candidate(details.assignment.id)

    try:
        with transaction(db):
            details.barcode = barcode
    except IntegrityError as exc:
        raise classify_integrity_error(exc, duplicate=BARCODE_TAKEN) from exc

    logger.info("barcode_generated", detail_id=detail_id)
    return barcode


def set_barcode(db: Session, detail_id: int, barcode: str | None) -> str | None:
    """Assign an explicit barcode; an empty value clears it."""
    details = db.get(EmployeeDetails, detail_id)
    if details is None:
        raise NotFoundError("Employee not found")

    barcode = (barcode or "").strip() or None
    try:
        with transaction(db):
            details.barcode = barcode
    except IntegrityError as exc:
        raise classify_integrity_error(exc, duplicate=BARCODE_TAKEN) from exc

    logger.info("barcode_updated", detail_id=detail_id, cleared=barcode is None)
    return barcode


def list_active_barcodes(db: Session) -> list[tuple[EmployeeDetails, EmployeeAssignment]]:
    return (
        db.query(EmployeeDetails, EmployeeAssignment)
        .join(EmployeeAssignment, EmployeeAssignment.detail_id == EmployeeDetails.id)
        .filter(EmployeeAssignment.status == STATUS_ACTIVE)
        .order_by(EmployeeDetails.name.asc())
        .all()
    )


def generate_missing_barcodes(db: Session) -> list[tuple[int, str]]:
    missing = (
        db.query(EmployeeDetails.id)
        .join(EmployeeAssignment, EmployeeAssignment.detail_id == EmployeeDetails.id)
        .filter(EmployeeDetails.barcode.is_(None))
        .order_by(EmployeeDetails.id)
        .all()
    )
    return [(detail_id, generate_barcode(db, detail_id)) for (detail_id,) in missing]
