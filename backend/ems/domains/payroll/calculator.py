from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class OvertimeRules:
    overtime_allowed: bool = False
    bonus_enabled: bool = False
    bonus_rate: float = 1.5
    standard_work_hours: float = 8.0


@dataclass
class LeaveRules:
    salary_deduction_enabled: bool = False
    max_allowed_leaves_per_month: int = 2
    max_allowed_leaves_per_year: int = 24
    deduction_rate: float = 1.0


@dataclass
class TaxRules:
    tax_enabled: bool = True
    tax_rate: float = 5.0  # percent
    tax_exemption_limit: float = 0.0


@dataclass
class PolicySet:
    overtime: OvertimeRules = field(default_factory=OvertimeRules)
    leave: LeaveRules = field(default_factory=LeaveRules)
    tax: TaxRules = field(default_factory=TaxRules)


@dataclass
class SalaryInput:
    base_salary: float
    working_days_in_month: int
    overtime_hours: float = 0.0
    leaves_taken: int = 0


@dataclass
class ExplanationLine:
    code: str
    label: str
    amount: float
    details: Dict[str, float] = field(default_factory=dict)


@dataclass
class SalaryBreakdown:
    base_salary: float
    daily_salary: float
    overtime_amount: float
    leave_deduction: float
    tax_deduction: float
    gross_salary: float
    net_salary: float
    explanations: List[ExplanationLine]

    @property
    def total_deductions(self) -> float:
        return round(self.leave_deduction + self.tax_deduction, 2)

    @property
    def total_additions(self) -> float:
        return self.overtime_amount


class SalaryCalculator:
    def __init__(self, policies: Optional[PolicySet] = None):
        self.policies = policies or PolicySet()

    def overtime_amount(self, request: SalaryInput) -> float:
        rules = self.policies.overtime
        if not (rules.overtime_allowed and rules.bonus_enabled) or request.overtime_hours <= 0:
            return 0.0
        hourly_rate = request.base_salary / (request.working_days_in_month * rules.standard_work_hours)
        return round(request.overtime_hours * hourly_rate * rules.bonus_rate, 2)

    def leave_deduction(self, request: SalaryInput, daily_salary: float) -> float:
        rules = self.policies.leave
        if not self.leave_results_in_deduction(request.leaves_taken):
            return 0.0
        excess = max(0, request.leaves_taken - rules.max_allowed_leaves_per_month)
        return round(excess * daily_salary * rules.deduction_rate, 2)

    def tax_amount(self, salary: float) -> float:
        rules = self.policies.tax
        if not rules.tax_enabled:
            return 0.0
        taxable = max(0.0, salary - (rules.tax_exemption_limit or 0))
        return round(taxable * rules.tax_rate / 100, 2)

    def leave_results_in_deduction(self, leaves_this_month: int) -> bool:
        rules = self.policies.leave
        return rules.salary_deduction_enabled and leaves_this_month > rules.max_allowed_leaves_per_month

    def calculate(self, request: SalaryInput) -> SalaryBreakdown:
        if request.working_days_in_month <= 0:
            raise ValueError("working_days_in_month must be positive")

        explanations: List[ExplanationLine] = []
        daily_salary = round(request.base_salary / request.working_days_in_month, 2)
        explanations.append(
            ExplanationLine(
                code="base",
                label="Base salary",
                amount=request.base_salary,
                details={"working_days": request.working_days_in_month, "daily": daily_salary},
            )
        )

        overtime = self.overtime_amount(request)
        if overtime:
            explanations.append(
                ExplanationLine(
                    code="overtime",
                    label="Overtime bonus",
                    amount=overtime,
                    details={"hours": request.overtime_hours, "rate": self.policies.overtime.bonus_rate},
                )
            )

        # Deduction is priced off the unrounded daily rate.
        leave = self.leave_deduction(request, request.base_salary / request.working_days_in_month)
        if leave:
            explanations.append(
                ExplanationLine(
                    code="leave_deduction",
                    label="Excess leave deduction",
                    amount=leave,
                    details={
                        "leaves_taken": request.leaves_taken,
                        "allowed": self.policies.leave.max_allowed_leaves_per_month,
                    },
                )
            )

        gross = round(request.base_salary + overtime - leave, 2)
        tax = self.tax_amount(gross)
        if tax:
            explanations.append(
                ExplanationLine(
                    code="tax",
                    label="Income tax",
                    amount=tax,
                    details={"rate": self.policies.tax.tax_rate, "exemption": self.policies.tax.tax_exemption_limit},
                )
            )

        return SalaryBreakdown(
            base_salary=request.base_salary,
            daily_salary=daily_salary,
            overtime_amount=overtime,
            leave_deduction=leave,
            tax_deduction=tax,
            gross_salary=gross,
            net_salary=round(gross - tax, 2),
            explanations=explanations,
        )
