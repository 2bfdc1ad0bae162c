from datetime import date

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ems.core.errors import NotFoundError
from ems.db.session import get_session
from ems.domains.employees.service import find_employee_by_email
from ems.models import Department, EmployeeAssignment, EmployeeDetails, Section

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

NOT_ASSIGNED = "Not Assigned"


class AdminStats(BaseModel):
    total_employees: int
    total_departments: int
    total_sections: int
    unassigned_employees: int


class EmployeeDashboard(BaseModel):
    emp_id: int | None = None
    detail_id: int
    name: str
    national_id: str
    start_date: date
    email: str
    status: str
    work_start_time: str
    work_end_time: str
    department_name: str
    section_name: str
    designation_title: str
    role_name: str


@router.get("/admin", response_model=AdminStats)
def admin_dashboard(db: Session = Depends(get_session)) -> AdminStats:
    unassigned = (
        db.query(EmployeeDetails.id)
        .outerjoin(EmployeeAssignment, EmployeeAssignment.detail_id == EmployeeDetails.id)
        .filter(EmployeeAssignment.id.is_(None))
        .count()
    )
    return AdminStats(
        total_employees=db.query(EmployeeAssignment).count(),
        total_departments=db.query(Department).count(),
        total_sections=db.query(Section).count(),
        unassigned_employees=unassigned,
    )


@router.get("/employee", response_model=EmployeeDashboard)
def employee_dashboard(email: str = Query(...), db: Session = Depends(get_session)) -> EmployeeDashboard:
    row = find_employee_by_email(db, email)
    if row is None:
        raise NotFoundError("Employee data not found")

    start, end = row["work_start_time"], row["work_end_time"]
    return EmployeeDashboard(
        emp_id=row["emp_id"],
        detail_id=row["detail_id"],
        name=row["name"],
        national_id=row["national_id"],
        start_date=row["start_date"],
        email=row["email"],
        status=row["status"],
        work_start_time=start.strftime("%H:%M:%S") if start else "09:00:00",
        work_end_time=end.strftime("%H:%M:%S") if end else "17:00:00",
        department_name=row["department_name"] or NOT_ASSIGNED,
        section_name=row["section_name"] or NOT_ASSIGNED,
        designation_title=row["designation_title"] or NOT_ASSIGNED,
        role_name=row["role_name"] or "Employee",
    )
