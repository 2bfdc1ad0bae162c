from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from ems.db.session import Base


class OvertimePolicy(Base):
    __tablename__ = "overtime_policies"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, unique=True, default=1)
    overtime_allowed = Column(Boolean, nullable=False, default=False)
    bonus_enabled = Column(Boolean, nullable=False, default=False)
    bonus_rate = Column(Numeric(5, 2), nullable=False, default=1.5)
    standard_work_hours = Column(Numeric(4, 2), nullable=False, default=8)
    overtime_threshold_minutes = Column(Integer, nullable=False, default=480)
    updated_by = Column(Integer, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class LeavePolicy(Base):
    __tablename__ = "leave_policies"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, unique=True, default=1)
    salary_deduction_enabled = Column(Boolean, nullable=False, default=False)
    max_allowed_leaves_per_month = Column(Integer, nullable=False, default=2)
    max_allowed_leaves_per_year = Column(Integer, nullable=False, default=24)
    deduction_rate = Column(Numeric(5, 2), nullable=False, default=1)
    updated_by = Column(Integer, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class TaxPolicy(Base):
    __tablename__ = "tax_policies"

    id = Column(Integer, primary_key=True, index=True)
    company_id = Column(Integer, nullable=False, unique=True, default=1)
    tax_enabled = Column(Boolean, nullable=False, default=True)
    tax_rate = Column(Numeric(5, 2), nullable=False, default=5)
    tax_exemption_limit = Column(Numeric(12, 2), nullable=False, default=0)
    updated_by = Column(Integer, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class OvertimeEntry(Base):
    __tablename__ = "employee_overtime"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employee_assignments.id"), nullable=False)
    date = Column(Date, nullable=False)
    overtime_hours = Column(Numeric(4, 2), nullable=False)
    status = Column(String(20), nullable=False, default="pending")  # pending|approved|rejected
    notes = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    employee = relationship("EmployeeAssignment")
