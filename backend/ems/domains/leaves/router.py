from datetime import date, datetime
from typing import Annotated, Literal

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ems.db.session import get_session
from ems.domains.leaves import service

router = APIRouter(prefix="/leaves", tags=["leaves"])


class LeaveApply(BaseModel):
    employee_id: int
    leave_type: Literal["short_leave", "holiday"]
    start_date: date
    end_date: date
    reason: Annotated[str, Field(min_length=1, max_length=500)]


class LeaveStatusUpdate(BaseModel):
    status: Literal["approved", "rejected", "viewed"]
    approved_by: int
    comments: Annotated[str, Field(max_length=500)] | None = None


class LeaveOut(BaseModel):
    id: int
    employee_id: int
    employee_name: str | None = None
    department_name: str | None = None
    designation_title: str | None = None
    leave_type: str
    start_date: date
    end_date: date
    days_requested: int
    reason: str
    status: str
    applied_date: datetime | None = None
    approved_by: int | None = None
    approved_date: datetime | None = None
    comments: str | None = None


class LeaveApplied(BaseModel):
    success: bool = True
    message: str
    leave_id: int
    days_requested: int


class LeaveStats(BaseModel):
    total: int
    pending: int
    approved: int
    rejected: int
    viewed: int
    approved_days: int


@router.post("", response_model=LeaveApplied, status_code=201)
def apply_leave(payload: LeaveApply, db: Session = Depends(get_session)):
    leave = service.apply_leave(db, **payload.model_dump())
    return LeaveApplied(
        message="Leave application submitted successfully",
        leave_id=leave.id,
        days_requested=leave.days_requested,
    )


@router.get("", response_model=list[LeaveOut])
def list_leaves(
    status: Literal["pending", "approved", "rejected", "viewed"] | None = None,
    employee_id: int | None = None,
    db: Session = Depends(get_session),
):
    return [LeaveOut(**row) for row in service.list_leaves(db, status=status, employee_id=employee_id)]


@router.get("/stats", response_model=LeaveStats)
def leave_stats(
    start_date: date | None = None,
    end_date: date | None = None,
    db: Session = Depends(get_session),
):
    return LeaveStats(**service.leave_stats(db, start_date, end_date))


@router.get("/employee/{employee_id}", response_model=list[LeaveOut])
def employee_leaves(employee_id: int, db: Session = Depends(get_session)):
    return [LeaveOut(**row) for row in service.list_leaves(db, employee_id=employee_id)]


@router.get("/{leave_id}", response_model=LeaveOut)
def get_leave(leave_id: int, db: Session = Depends(get_session)):
    return LeaveOut(**service.get_leave(db, leave_id))


@router.put("/{leave_id}/status", response_model=LeaveOut)
def update_leave_status(leave_id: int, payload: LeaveStatusUpdate, db: Session = Depends(get_session)):
    service.update_status(
        db,
        leave_id,
        status=payload.status,
        approved_by=payload.approved_by,
        comments=payload.comments,
    )
    return LeaveOut(**service.get_leave(db, leave_id))


@router.delete("/{leave_id}")
def delete_leave(
    leave_id: int,
    employee_id: int = Query(..., description="Applicant withdrawing the application"),
    db: Session = Depends(get_session),
) -> dict[str, str]:
    service.delete_leave(db, leave_id, employee_id)
    return {"message": "Leave application deleted successfully"}
