from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ems.db.session import get_session
from ems.domains.barcodes import service

router = APIRouter(prefix="/barcode", tags=["barcode"])


class BarcodeUpdate(BaseModel):
    barcode: str | None = None


class BarcodeResult(BaseModel):
    success: bool = True
    barcode: str | None = None
    message: str


class EmployeeBarcodeOut(BaseModel):
    detail_id: int
    emp_id: int
    name: str
    email: str
    barcode: str | None = None
    status: str


@router.get("/employees", response_model=list[EmployeeBarcodeOut])
def list_employee_barcodes(db: Session = Depends(get_session)):
    return [
        EmployeeBarcodeOut(
            detail_id=details.id,
            emp_id=assignment.id,
            name=details.name,
            email=details.email,
            barcode=details.barcode,
            status=assignment.status,
        )
        for details, assignment in service.list_active_barcodes(db)
    ]


@router.post("/generate/{detail_id}", response_model=BarcodeResult)
def generate_employee_barcode(detail_id: int, db: Session = Depends(get_session)):
    barcode = service.generate_barcode(db, detail_id)
    return BarcodeResult(barcode=barcode, message="Barcode generated successfully")


@router.put("/update/{detail_id}", response_model=BarcodeResult)
def update_employee_barcode(detail_id: int, payload: BarcodeUpdate, db: Session = Depends(get_session)):
    barcode = service.set_barcode(db, detail_id, payload.barcode)
    return BarcodeResult(barcode=barcode, message="Barcode updated successfully")
