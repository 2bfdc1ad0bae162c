import datetime as dt
from typing import Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ems.core.errors import AlreadyMarkedError, NotFoundError
from ems.db.session import get_session
from ems.domains.attendance import service

router = APIRouter(prefix="/attendance", tags=["attendance"])

AttendanceStatus = Literal["Present", "Absent", "Late", "Half Day"]


class AttendanceIn(BaseModel):
    employee_id: int
    date: dt.date
    status: AttendanceStatus
    notes: str | None = None
    check_in: dt.time | None = None
    check_out: dt.time | None = None


class AttendanceOut(BaseModel):
    id: int
    employee_id: int
    date: dt.date
    check_in: dt.time | None = None
    check_out: dt.time | None = None
    status: str
    hours_worked: float
    notes: str | None = None
    employee_name: str | None = None
    department_name: str | None = None
    designation_title: str | None = None


class AttendanceSaved(BaseModel):
    message: str
    result: Literal["added", "updated"]
    id: int


class AttendanceStats(BaseModel):
    total: int
    present: int
    absent: int
    late: int
    half_day: int


class BarcodeScan(BaseModel):
    barcode: str
    date: dt.date | None = None


class BarcodeScanResult(BaseModel):
    success: bool
    message: str
    employee_name: str | None = None


class BarcodeEmployeeOut(BaseModel):
    emp_id: int
    detail_id: int
    name: str
    email: str
    barcode: str
    status: str


@router.get("/date/{day}", response_model=list[AttendanceOut])
def list_attendance(day: dt.date, db: Session = Depends(get_session)):
    return [AttendanceOut(**row) for row in service.list_by_date(db, day)]


@router.get("/stats/{day}", response_model=AttendanceStats)
def attendance_stats(day: dt.date, db: Session = Depends(get_session)):
    return AttendanceStats(**service.stats_for_date(db, day))


@router.post("", response_model=AttendanceSaved)
def add_or_update_attendance(payload: AttendanceIn, db: Session = Depends(get_session)):
    outcome, record = service.add_or_update(
        db,
        employee_id=payload.employee_id,
        day=payload.date,
        status=payload.status,
        notes=payload.notes,
        check_in=payload.check_in,
        check_out=payload.check_out,
    )
    return AttendanceSaved(message=f"Attendance {outcome} successfully", result=outcome, id=record.id)


@router.post("/barcode", response_model=BarcodeScanResult)
def mark_attendance_by_barcode(payload: BarcodeScan, db: Session = Depends(get_session)):
    # Unknown barcodes and repeat scans are normal outcomes for the scanner UI.
    try:
        result = service.mark_by_barcode(db, payload.barcode.strip(), payload.date)
    except NotFoundError as exc:
        return BarcodeScanResult(success=False, message=exc.message)
    except AlreadyMarkedError as exc:
        return BarcodeScanResult(success=False, message=exc.message, employee_name=exc.employee_name)
    return BarcodeScanResult(success=True, message=result["message"], employee_name=result["employee_name"])


@router.get("/employee/barcode/{barcode}", response_model=BarcodeEmployeeOut)
def get_employee_by_barcode(barcode: str, db: Session = Depends(get_session)):
    found = service.find_by_barcode(db, barcode)
    if found is None:
        raise NotFoundError("Employee not found")
    assignment, details = found
    return BarcodeEmployeeOut(
        emp_id=assignment.id,
        detail_id=details.id,
        name=details.name,
        email=details.email,
        barcode=details.barcode,
        status=assignment.status,
    )


@router.get("/employee/{employee_id}", response_model=list[AttendanceOut])
def employee_attendance_report(
    employee_id: int,
    start_date: dt.date | None = None,
    end_date: dt.date | None = None,
    db: Session = Depends(get_session),
):
    return [AttendanceOut(**row) for row in service.employee_report(db, employee_id, start_date, end_date)]


@router.delete("/{attendance_id}")
def delete_attendance(attendance_id: int, db: Session = Depends(get_session)) -> dict[str, str]:
    service.delete_attendance(db, attendance_id)
    return {"message": "Attendance record deleted successfully"}
