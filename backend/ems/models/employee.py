from datetime import datetime, time

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Time
from sqlalchemy.orm import relationship

from ems.db.session import Base

EMPLOYMENT_TYPES = ("fixed", "editable")
STATUS_ACTIVE = "Active"
STATUS_CHANGED = "Changed"
STATUS_UNASSIGNED = "Unassigned"


class EmployeeDetails(Base):
    """Identity record created at hire; may exist without an assignment."""

    __tablename__ = "employee_details"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    national_id = Column(String(15), nullable=False, unique=True)  # CNIC
    start_date = Column(Date, nullable=False)
    email = Column(String(100), nullable=False, unique=True)

    # NULL for any number of rows, unique otherwise
    barcode = Column(String(100), nullable=True, unique=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    assignment = relationship("EmployeeAssignment", back_populates="details", uselist=False)


class EmployeeAssignment(Base):
    """Operational record tying an employee to a section and designation."""

    __tablename__ = "employee_assignments"

    id = Column(Integer, primary_key=True, index=True)
    detail_id = Column(Integer, ForeignKey("employee_details.id"), nullable=False, unique=True)
    section_id = Column(Integer, ForeignKey("sections.id"), nullable=False)
    designation_id = Column(Integer, ForeignKey("designations.id"), nullable=False)

    employment_type = Column(String(10), nullable=False, default="editable")  # fixed|editable
    status = Column(String(20), nullable=False, default=STATUS_ACTIVE)     # Active|Changed

    work_start_time = Column(Time, nullable=False, default=time(9, 0))
    work_end_time = Column(Time, nullable=False, default=time(17, 0))
    salary = Column(Numeric(12, 2), nullable=False, default=50000)
    bonus = Column(Numeric(12, 2), nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    details = relationship("EmployeeDetails", back_populates="assignment")
    section = relationship("Section")
    designation = relationship("Designation")
