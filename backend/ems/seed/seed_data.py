from sqlalchemy.orm import Session

from ems.core.config import settings
from ems.core.security import hash_password
from ems.models import Department, Designation, LeavePolicy, OvertimePolicy, Role, Section, TaxPolicy, User

REFERENCE_HIERARCHY = {
    "Human Resources": ["Recruitment", "Employee Relations"],
    "Information Technology": ["Software Development", "Infrastructure"],
    "Finance": ["Accounts", "Payroll"],
}
REFERENCE_ROLES = {
    "Management": ["Manager", "Team Lead"],
    "Staff": ["Software Engineer", "Accountant", "HR Officer"],
}


def seed_reference_data(session: Session) -> None:
    """Insert the org hierarchy when the tables are empty."""
    if session.query(Department).count() == 0:
        for department_name, section_names in REFERENCE_HIERARCHY.items():
            department = Department(name=department_name)
            session.add(department)
            session.flush()
            session.add_all([Section(name=name, department_id=department.id) for name in section_names])

    if session.query(Role).count() == 0:
        for role_name, titles in REFERENCE_ROLES.items():
            role = Role(name=role_name)
            session.add(role)
            session.flush()
            session.add_all([Designation(title=title, role_id=role.id) for title in titles])


def seed_policies(session: Session, company_id: int | None = None) -> None:
    company_id = company_id or settings.company_id
    for model in (OvertimePolicy, LeavePolicy, TaxPolicy):
        if session.query(model).filter(model.company_id == company_id).count() == 0:
            session.add(model(company_id=company_id))


def ensure_admin(session: Session, email: str, password: str, username: str = "admin") -> User:
    user = session.query(User).filter(User.email == email).one_or_none()
    if user is None:
        user = User(username=username, email=email, role="Admin", hashed_password=hash_password(password))
        session.add(user)
    else:
        user.role = "Admin"
        user.hashed_password = hash_password(password)
    session.flush()
    return user


def seed(session: Session, admin_email: str = "admin@example.com", admin_password: str = "admin123") -> None:
    seed_reference_data(session)
    seed_policies(session)
    ensure_admin(session, admin_email, admin_password)
    session.commit()
