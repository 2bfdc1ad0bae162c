from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ems.core.errors import NotFoundError, ValidationError
from ems.db.session import get_session
from ems.domains.payroll.calculator import (
    LeaveRules,
    OvertimeRules,
    PolicySet,
    SalaryCalculator,
    SalaryInput,
    TaxRules,
)
from ems.domains.policies.service import find_policy
from ems.models import EmployeeAssignment, LeavePolicy, OvertimePolicy, TaxPolicy

router = APIRouter(prefix="/payroll", tags=["payroll"])


class SalaryPreviewRequest(BaseModel):
    employee_id: int | None = None
    base_salary: Annotated[float, Field(ge=0)] | None = None
    working_days_in_month: Annotated[int, Field(gt=0)] = 26
    overtime_hours: Annotated[float, Field(ge=0)] = 0
    leaves_taken: Annotated[int, Field(ge=0)] = 0


class ExplanationOut(BaseModel):
    code: str
    label: str
    amount: float
    details: dict[str, float]


class SalaryPreviewOut(BaseModel):
    employee_id: int | None = None
    base_salary: float
    daily_salary: float
    overtime_amount: float
    leave_deduction: float
    tax_deduction: float
    gross_salary: float
    net_salary: float
    total_deductions: float
    total_additions: float
    explanations: list[ExplanationOut]


def load_policy_set(db: Session) -> PolicySet:
    policies = PolicySet()
    overtime = find_policy(db, OvertimePolicy)
    if overtime:
        policies.overtime = OvertimeRules(
            overtime_allowed=overtime.overtime_allowed,
            bonus_enabled=overtime.bonus_enabled,
            bonus_rate=float(overtime.bonus_rate),
            standard_work_hours=float(overtime.standard_work_hours),
        )
    leave = find_policy(db, LeavePolicy)
    if leave:
        policies.leave = LeaveRules(
            salary_deduction_enabled=leave.salary_deduction_enabled,
            max_allowed_leaves_per_month=leave.max_allowed_leaves_per_month,
            max_allowed_leaves_per_year=leave.max_allowed_leaves_per_year,
            deduction_rate=float(leave.deduction_rate),
        )
    tax = find_policy(db, TaxPolicy)
    if tax:
        policies.tax = TaxRules(
            tax_enabled=tax.tax_enabled,
            tax_rate=float(tax.tax_rate),
            tax_exemption_limit=float(tax.tax_exemption_limit),
        )
    return policies


@router.post("/salary-preview", response_model=SalaryPreviewOut)
def salary_preview(payload: SalaryPreviewRequest, db: Session = Depends(get_session)) -> SalaryPreviewOut:
    base_salary = payload.base_salary
    if payload.employee_id is not None:
        assignment = db.get(EmployeeAssignment, payload.employee_id)
        if assignment is None:
            raise NotFoundError("Employee not found")
        if base_salary is None:
            base_salary = float(assignment.salary)
    if base_salary is None:
        raise ValidationError("Either employee_id or base_salary is required")

    calculator = SalaryCalculator(load_policy_set(db))
    result = calculator.calculate(
        SalaryInput(
            base_salary=base_salary,
            working_days_in_month=payload.working_days_in_month,
            overtime_hours=payload.overtime_hours,
            leaves_taken=payload.leaves_taken,
        )
    )
    return SalaryPreviewOut(
        employee_id=payload.employee_id,
        base_salary=result.base_salary,
        daily_salary=result.daily_salary,
        overtime_amount=result.overtime_amount,
        leave_deduction=result.leave_deduction,
        tax_deduction=result.tax_deduction,
        gross_salary=result.gross_salary,
        net_salary=result.net_salary,
        total_deductions=result.total_deductions,
        total_additions=result.total_additions,
        explanations=[
            ExplanationOut(code=line.code, label=line.label, amount=line.amount, details=line.details)
            for line in result.explanations
        ],
    )
