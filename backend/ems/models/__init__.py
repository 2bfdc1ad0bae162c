from .attendance import Attendance
from .employee import EmployeeAssignment, EmployeeDetails
from .hierarchy import Department, Designation, Role, Section
from .leave import LeaveApplication
from .policy import LeavePolicy, OvertimeEntry, OvertimePolicy, TaxPolicy
from .user import User

__all__ = [
    "User",
    "EmployeeDetails",
    "EmployeeAssignment",
    "Department",
    "Section",
    "Designation",
    "Role",
    "Attendance",
    "LeaveApplication",
    "OvertimePolicy",
    "LeavePolicy",
    "TaxPolicy",
    "OvertimeEntry",
]
