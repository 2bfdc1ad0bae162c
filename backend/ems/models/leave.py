from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from ems.db.session import Base

LEAVE_TYPES = ("short_leave", "holiday")
LEAVE_PENDING = "pending"
LEAVE_DECISIONS = ("approved", "rejected", "viewed")


class LeaveApplication(Base):
    __tablename__ = "leave_applications"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employee_assignments.id"), nullable=False)
    leave_type = Column(String(20), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    days_requested = Column(Integer, nullable=False)
    reason = Column(String(500), nullable=False)
    status = Column(String(20), nullable=False, default=LEAVE_PENDING)
    applied_date = Column(DateTime, default=datetime.utcnow)

    # Either an assignment id or an admin user id, so no foreign key
    approved_by = Column(Integer, nullable=True)
    approved_date = Column(DateTime, nullable=True)
    comments = Column(String(500), nullable=True)

    employee = relationship("EmployeeAssignment")
