import datetime as dt
from typing import Annotated, Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ems.db.session import get_session
from ems.domains.policies import service
from ems.models import LeavePolicy, OvertimePolicy, TaxPolicy

router = APIRouter(prefix="/policies", tags=["policies"])


class OvertimePolicyIn(BaseModel):
    overtime_allowed: bool
    bonus_enabled: bool
    bonus_rate: float
    updated_by: int | None = None


class OvertimePolicyOut(BaseModel):
    id: int
    company_id: int
    overtime_allowed: bool
    bonus_enabled: bool
    bonus_rate: float
    standard_work_hours: float
    overtime_threshold_minutes: int


class LeavePolicyIn(BaseModel):
    salary_deduction_enabled: bool
    max_allowed_leaves_per_month: int
    max_allowed_leaves_per_year: int
    deduction_rate: float
    updated_by: int | None = None


class LeavePolicyOut(BaseModel):
    id: int
    company_id: int
    salary_deduction_enabled: bool
    max_allowed_leaves_per_month: int
    max_allowed_leaves_per_year: int
    deduction_rate: float


class TaxPolicyIn(BaseModel):
    tax_enabled: bool
    tax_rate: float
    tax_exemption_limit: float
    updated_by: int | None = None


class TaxPolicyOut(BaseModel):
    id: int
    company_id: int
    tax_enabled: bool
    tax_rate: float
    tax_exemption_limit: float


class AllPoliciesOut(BaseModel):
    overtime_policy: OvertimePolicyOut | None = None
    leave_policy: LeavePolicyOut | None = None
    tax_deduction_policy: TaxPolicyOut | None = None


class OvertimeEntryIn(BaseModel):
    employee_id: int
    date: dt.date
    overtime_hours: float
    notes: Annotated[str, Field(max_length=500)] | None = None


class OvertimeStatusIn(BaseModel):
    overtime_id: int
    status: Literal["approved", "rejected", "pending"]
    notes: str | None = None


class OvertimeEntryOut(BaseModel):
    id: int
    employee_id: int
    employee_name: str | None = None
    date: dt.date
    overtime_hours: float
    status: str
    notes: str | None = None


def overtime_out(policy: OvertimePolicy) -> OvertimePolicyOut:
    return OvertimePolicyOut(
        id=policy.id,
        company_id=policy.company_id,
        overtime_allowed=policy.overtime_allowed,
        bonus_enabled=policy.bonus_enabled,
        bonus_rate=float(policy.bonus_rate),
        standard_work_hours=float(policy.standard_work_hours),
        overtime_threshold_minutes=policy.overtime_threshold_minutes,
    )


def leave_out(policy: LeavePolicy) -> LeavePolicyOut:
    return LeavePolicyOut(
        id=policy.id,
        company_id=policy.company_id,
        salary_deduction_enabled=policy.salary_deduction_enabled,
        max_allowed_leaves_per_month=policy.max_allowed_leaves_per_month,
        max_allowed_leaves_per_year=policy.max_allowed_leaves_per_year,
        deduction_rate=float(policy.deduction_rate),
    )


def tax_out(policy: TaxPolicy) -> TaxPolicyOut:
    return TaxPolicyOut(
        id=policy.id,
        company_id=policy.company_id,
        tax_enabled=policy.tax_enabled,
        tax_rate=float(policy.tax_rate),
        tax_exemption_limit=float(policy.tax_exemption_limit),
    )


@router.get("", response_model=AllPoliciesOut)
def get_all_policies(db: Session = Depends(get_session)):
    overtime = service.find_policy(db, OvertimePolicy)
    leave = service.find_policy(db, LeavePolicy)
    tax = service.find_policy(db, TaxPolicy)
    return AllPoliciesOut(
        overtime_policy=overtime_out(overtime) if overtime else None,
        leave_policy=leave_out(leave) if leave else None,
        tax_deduction_policy=tax_out(tax) if tax else None,
    )


@router.get("/overtime", response_model=OvertimePolicyOut)
def get_overtime_policy(db: Session = Depends(get_session)):
    return overtime_out(service.get_policy(db, OvertimePolicy))


@router.put("/overtime", response_model=OvertimePolicyOut)
def update_overtime_policy(payload: OvertimePolicyIn, db: Session = Depends(get_session)):
    return overtime_out(service.update_overtime_policy(db, **payload.model_dump()))


@router.get("/leave", response_model=LeavePolicyOut)
def get_leave_policy(db: Session = Depends(get_session)):
    return leave_out(service.get_policy(db, LeavePolicy))


@router.put("/leave", response_model=LeavePolicyOut)
def update_leave_policy(payload: LeavePolicyIn, db: Session = Depends(get_session)):
    return leave_out(service.update_leave_policy(db, **payload.model_dump()))


@router.get("/tax", response_model=TaxPolicyOut)
def get_tax_policy(db: Session = Depends(get_session)):
    return tax_out(service.get_policy(db, TaxPolicy))


@router.put("/tax", response_model=TaxPolicyOut)
def update_tax_policy(payload: TaxPolicyIn, db: Session = Depends(get_session)):
    return tax_out(service.update_tax_policy(db, **payload.model_dump()))


@router.get("/employees-overtime", response_model=list[OvertimeEntryOut])
def list_employee_overtime(
    start_date: dt.date | None = None,
    end_date: dt.date | None = None,
    db: Session = Depends(get_session),
):
    return [OvertimeEntryOut(**row) for row in service.list_overtime(db, start_date, end_date)]


@router.post("/employee-overtime", response_model=OvertimeEntryOut, status_code=201)
def add_employee_overtime(payload: OvertimeEntryIn, db: Session = Depends(get_session)):
    entry = service.add_overtime(
        db,
        employee_id=payload.employee_id,
        day=payload.date,
        overtime_hours=payload.overtime_hours,
        notes=payload.notes,
    )
    return OvertimeEntryOut(
        id=entry.id,
        employee_id=entry.employee_id,
        date=entry.date,
        overtime_hours=float(entry.overtime_hours),
        status=entry.status,
        notes=entry.notes,
    )


@router.put("/overtime-status", response_model=OvertimeEntryOut)
def update_overtime_status(payload: OvertimeStatusIn, db: Session = Depends(get_session)):
    entry = service.update_overtime_status(db, payload.overtime_id, payload.status, payload.notes)
    return OvertimeEntryOut(
        id=entry.id,
        employee_id=entry.employee_id,
        date=entry.date,
        overtime_hours=float(entry.overtime_hours),
        status=entry.status,
        notes=entry.notes,
    )
