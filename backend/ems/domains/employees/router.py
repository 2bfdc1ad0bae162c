from datetime import date, time
from typing import Annotated, Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from ems.db.session import get_session
from ems.domains.employees import service

router = APIRouter(prefix="/employees", tags=["employees"])

NonEmpty = Annotated[str, Field(min_length=1)]
Money = Annotated[float, Field(ge=0)]


class EmployeeCreate(BaseModel):
    name: NonEmpty
    national_id: Annotated[str, Field(min_length=1, max_length=15)]
    start_date: date
    email: NonEmpty
    password: str | None = None
    section_id: int | None = None
    designation_id: int | None = None
    employment_type: Literal["fixed", "editable"] = "editable"
    work_start_time: str | None = None
    work_end_time: str | None = None
    salary: Money | None = None
    bonus: Money | None = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str) -> str:
        email = value.strip()
        if "@" not in email:
            raise ValueError("Invalid email format")
        return email


class EmployeeCreated(BaseModel):
    message: str
    detail_id: int
    assignment_id: int | None = None


class EmployeeAssign(BaseModel):
    section_id: int
    designation_id: int
    role_id: int
    employment_type: Literal["fixed", "editable"] = "editable"
    work_start_time: str | None = None
    work_end_time: str | None = None
    salary: Money | None = None
    bonus: Money | None = None


class AssignmentUpdate(BaseModel):
    section_id: int | None = None
    designation_id: int | None = None
    employment_type: Literal["fixed", "editable"] | None = None
    work_start_time: str | None = None
    work_end_time: str | None = None
    salary: Money | None = None
    bonus: Money | None = None


class PersonalInfoUpdate(BaseModel):
    name: str | None = None
    email: str | None = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        if value is not None and "@" not in value:
            raise ValueError("Invalid email format")
        return value


class EmployeeOut(BaseModel):
    detail_id: int
    emp_id: int | None = None
    assigned: bool
    name: str
    national_id: str
    start_date: date
    email: str
    barcode: str | None = None
    status: str
    employment_type: str | None = None
    section_id: int | None = None
    section_name: str | None = None
    department_id: int | None = None
    department_name: str | None = None
    designation_id: int | None = None
    designation_title: str | None = None
    role_id: int | None = None
    role_name: str | None = None
    work_start_time: time | None = None
    work_end_time: time | None = None
    salary: float | None = None
    bonus: float | None = None


class MessageOut(BaseModel):
    message: str


@router.get("", response_model=list[EmployeeOut])
def list_employees(db: Session = Depends(get_session)) -> list[EmployeeOut]:
    return [EmployeeOut(**row) for row in service.list_employees(db)]


@router.get("/unassigned", response_model=list[EmployeeOut])
def list_unassigned_employees(db: Session = Depends(get_session)) -> list[EmployeeOut]:
    return [EmployeeOut(**row) for row in service.list_employees(db, unassigned_only=True)]


@router.get("/{detail_id}", response_model=EmployeeOut)
def get_employee(detail_id: int, db: Session = Depends(get_session)) -> EmployeeOut:
    return EmployeeOut(**service.get_employee(db, detail_id))


@router.post("", response_model=EmployeeCreated, status_code=201)
def add_employee(payload: EmployeeCreate, db: Session = Depends(get_session)) -> EmployeeCreated:
    details, assignment = service.add_employee(db, **payload.model_dump())
    return EmployeeCreated(
        message="Employee added successfully",
        detail_id=details.id,
        assignment_id=assignment.id if assignment else None,
    )


@router.post("/assign/{detail_id}", response_model=EmployeeOut)
def assign_employee(detail_id: int, payload: EmployeeAssign, db: Session = Depends(get_session)) -> EmployeeOut:
    service.assign_employee(db, detail_id, **payload.model_dump())
    return EmployeeOut(**service.get_employee(db, detail_id))


@router.put("/{assignment_id}/assignment", response_model=EmployeeOut)
def update_assignment(
    assignment_id: int, payload: AssignmentUpdate, db: Session = Depends(get_session)
) -> EmployeeOut:
    assignment = service.update_assignment(db, assignment_id, payload.model_dump(exclude_unset=True))
    return EmployeeOut(**service.get_employee(db, assignment.detail_id))


@router.put("/details/{detail_id}", response_model=EmployeeOut)
def update_personal_info(
    detail_id: int, payload: PersonalInfoUpdate, db: Session = Depends(get_session)
) -> EmployeeOut:
    service.update_personal_info(db, detail_id, payload.model_dump(exclude_unset=True))
    return EmployeeOut(**service.get_employee(db, detail_id))


@router.delete("/det/{detail_id}", response_model=MessageOut)
def delete_employee_by_detail(detail_id: int, db: Session = Depends(get_session)) -> MessageOut:
    service.delete_employee(db, detail_id=detail_id)
    return MessageOut(message="Employee deleted successfully")


@router.delete("/{assignment_id}", response_model=MessageOut)
def delete_employee(assignment_id: int, db: Session = Depends(get_session)) -> MessageOut:
    service.delete_employee(db, assignment_id=assignment_id)
    return MessageOut(message="Employee deleted successfully")
