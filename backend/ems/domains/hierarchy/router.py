from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ems.db.session import get_session
from ems.domains.hierarchy import service

router = APIRouter(tags=["hierarchy"])


class DepartmentIn(BaseModel):
    name: str


class DepartmentOut(BaseModel):
    id: int
    name: str


class SectionIn(BaseModel):
    name: str
    department_id: int


class SectionOut(BaseModel):
    id: int
    name: str
    department_id: int
    department_name: str | None = None


class DesignationIn(BaseModel):
    title: str
    role_id: int | None = None


class DesignationOut(BaseModel):
    id: int
    title: str
    role_id: int | None = None
    role_name: str | None = None


class RoleIn(BaseModel):
    name: str


class RoleOut(BaseModel):
    id: int
    name: str


class CascadeOut(BaseModel):
    message: str
    deleted: dict[str, int]


def _cascade_out(label: str, summary: service.CascadeSummary) -> CascadeOut:
    return CascadeOut(message=f"{label} deleted successfully", deleted=summary.as_dict())


@router.get("/departments", response_model=list[DepartmentOut])
def list_departments(db: Session = Depends(get_session)):
    return [DepartmentOut(id=row.id, name=row.name) for row in service.list_departments(db)]


@router.post("/departments", response_model=DepartmentOut, status_code=201)
def add_department(payload: DepartmentIn, db: Session = Depends(get_session)):
    row = service.add_department(db, payload.name)
    return DepartmentOut(id=row.id, name=row.name)


@router.put("/departments/{department_id}", response_model=DepartmentOut)
def update_department(department_id: int, payload: DepartmentIn, db: Session = Depends(get_session)):
    row = service.update_department(db, department_id, payload.name)
    return DepartmentOut(id=row.id, name=row.name)


@router.delete("/departments/{department_id}", response_model=CascadeOut)
def delete_department(department_id: int, db: Session = Depends(get_session)):
    return _cascade_out("Department", service.delete_department(db, department_id))


@router.get("/sections", response_model=list[SectionOut])
def list_sections(db: Session = Depends(get_session)):
    return [
        SectionOut(id=section.id, name=section.name, department_id=section.department_id, department_name=department.name)
        for section, department in service.list_sections(db)
    ]


@router.post("/sections", response_model=SectionOut, status_code=201)
def add_section(payload: SectionIn, db: Session = Depends(get_session)):
    row = service.add_section(db, payload.name, payload.department_id)
    return SectionOut(id=row.id, name=row.name, department_id=row.department_id)


@router.put("/sections/{section_id}", response_model=SectionOut)
def update_section(section_id: int, payload: SectionIn, db: Session = Depends(get_session)):
    row = service.update_section(db, section_id, payload.name, payload.department_id)
    return SectionOut(id=row.id, name=row.name, department_id=row.department_id)


@router.delete("/sections/{section_id}", response_model=CascadeOut)
def delete_section(section_id: int, db: Session = Depends(get_session)):
    return _cascade_out("Section", service.delete_section(db, section_id))


@router.get("/designations", response_model=list[DesignationOut])
def list_designations(db: Session = Depends(get_session)):
    return [
        DesignationOut(
            id=designation.id,
            title=designation.title,
            role_id=designation.role_id,
            role_name=role.name if role else None,
        )
        for designation, role in service.list_designations(db)
    ]


@router.post("/designations", response_model=DesignationOut, status_code=201)
def add_designation(payload: DesignationIn, db: Session = Depends(get_session)):
    row = service.add_designation(db, payload.title, payload.role_id)
    return DesignationOut(id=row.id, title=row.title, role_id=row.role_id)


@router.put("/designations/{designation_id}", response_model=DesignationOut)
def update_designation(designation_id: int, payload: DesignationIn, db: Session = Depends(get_session)):
    row = service.update_designation(db, designation_id, payload.title, payload.role_id)
    return DesignationOut(id=row.id, title=row.title, role_id=row.role_id)


@router.delete("/designations/{designation_id}", response_model=CascadeOut)
def delete_designation(designation_id: int, db: Session = Depends(get_session)):
    return _cascade_out("Designation", service.delete_designation(db, designation_id))


@router.get("/roles", response_model=list[RoleOut])
def list_roles(db: Session = Depends(get_session)):
    return [RoleOut(id=row.id, name=row.name) for row in service.list_roles(db)]


@router.post("/roles", response_model=RoleOut, status_code=201)
def add_role(payload: RoleIn, db: Session = Depends(get_session)):
    row = service.add_role(db, payload.name)
    return RoleOut(id=row.id, name=row.name)


@router.put("/roles/{role_id}", response_model=RoleOut)
def update_role(role_id: int, payload: RoleIn, db: Session = Depends(get_session)):
    row = service.update_role(db, role_id, payload.name)
    return RoleOut(id=row.id, name=row.name)


@router.delete("/roles/{role_id}", response_model=CascadeOut)
def delete_role(role_id: int, db: Session = Depends(get_session)):
    return _cascade_out("Role", service.delete_role(db, role_id))
