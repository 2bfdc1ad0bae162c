from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from ems.core.errors import DependencyError, NotFoundError, ServerError
from ems.domains.employees import service as employees
from ems.domains.hierarchy import service
from ems.models import Attendance, Department, EmployeeAssignment, EmployeeDetails, Section, User


def test_department_crud(client):
    created = client.post("/departments", json={"name": "  Finance "})
    assert created.status_code == 201
    department = created.json()
    assert department["name"] == "Finance"

    renamed = client.put(f"/departments/{department['id']}", json={"name": "Accounts"})
    assert renamed.json()["name"] == "Accounts"
    assert client.get("/departments").json() == [{"id": department["id"], "name": "Accounts"}]


def test_blank_department_name_rejected(client):
    response = client.post("/departments", json={"name": "   "})

    assert response.status_code == 400
    assert response.json()["detail"] == "Department name is required"


def test_section_requires_existing_department(client):
    response = client.post("/sections", json={"name": "Orphan", "department_id": 99})

    assert response.status_code == 400
    assert response.json()["detail"] == "Section requires an existing department"


def test_sections_list_department_name(client, org):
    sections = client.get("/sections").json()

    assert sections == [
        {"id": org["section_id"], "name": "Backend", "department_id": org["department_id"], "department_name": "Engineering"}
    ]


def test_designation_role_is_optional(client):
    response = client.post("/designations", json={"title": "Intern"})

    assert response.status_code == 201
    assert response.json()["role_id"] is None
    assert client.get("/designations").json()[0]["role_name"] is None


def test_unknown_nodes_return_404(client):
    assert client.put("/departments/5", json={"name": "x"}).status_code == 404
    assert client.delete("/sections/5").json()["detail"] == "Section not found"
    assert client.delete("/designations/5").status_code == 404
    assert client.delete("/roles/5").status_code == 404


def test_department_delete_cascades_to_employees(client, org, make_employee):
    first = make_employee(password="secret123")
    second = make_employee()
    client.post("/attendance", json={"employee_id": first["assignment_id"], "date": "2025-06-01", "status": "Present"})
    client.post(
        "/leaves",
        json={
            "employee_id": second["assignment_id"],
            "leave_type": "holiday",
            "start_date": "2025-07-01",
            "end_date": "2025-07-02",
            "reason": "Family event",
        },
    )

    response = client.delete(f"/departments/{org['department_id']}")

    assert response.status_code == 200
    deleted = response.json()["deleted"]
    assert deleted["departments"] == 1
    assert deleted["sections"] == 1
    assert deleted["employees"] == 2
    assert deleted["attendance"] == 1
    assert deleted["leaves"] == 1
    assert deleted["users"] == 1

    assert client.get("/employees").json() == []
    assert client.get("/sections").json() == []
    assert client.get("/attendance/date/2025-06-01").json() == []
    login = client.post("/auth/login", json={"username": "employee1@example.com", "password": "secret123"})
    assert login.status_code == 401
    # designations and roles live in a separate tree
    assert len(client.get("/designations").json()) == 1


def test_role_delete_cascades_through_designations(client, org, make_employee):
    make_employee()

    response = client.delete(f"/roles/{org['role_id']}")

    assert response.status_code == 200
    deleted = response.json()["deleted"]
    assert deleted == {
        "departments": 0,
        "sections": 0,
        "designations": 1,
        "roles": 1,
        "employees": 1,
        "attendance": 0,
        "leaves": 0,
        "overtime": 0,
        "users": 0,
    }
    assert client.get("/designations").json() == []
    assert client.get("/employees").json() == []
    assert len(client.get("/sections").json()) == 1


def test_unassigned_employees_survive_cascade(client, org, make_employee):
    make_employee(assigned=False)

    client.delete(f"/sections/{org['section_id']}")

    assert len(client.get("/employees/unassigned").json()) == 1


def _hire(db, org, n):
    return employees.add_employee(
        db,
        name=f"Worker {n}",
        national_id=f"44444-000000{n}-4",
        start_date=date(2025, 1, 1),
        email=f"worker{n}@example.com",
        password="secret123",
        section_id=org["section_id"],
        designation_id=org["designation_id"],
    )


def test_cascade_failure_removes_nothing(db, db_org, monkeypatch):
    for n in range(3):
        _, assignment = _hire(db, db_org, n)
        db.add(Attendance(employee_id=assignment.id, date=date(2025, 6, 1), status="Present"))
    db.commit()

    real_purge = service._purge_assignment
    calls = {"n": 0}

    def flaky_purge(session, assignment, summary):
        calls["n"] += 1
        if calls["n"] == 2:
            raise OperationalError("DELETE FROM employee_assignments", {}, Exception("database is locked"))
        real_purge(session, assignment, summary)

    monkeypatch.setattr(service, "_purge_assignment", flaky_purge)

    with pytest.raises(ServerError):
        service.delete_department(db, db_org["department_id"])

    assert calls["n"] == 2
    assert db.query(Department).count() == 1
    assert db.query(Section).count() == 1
    assert db.query(EmployeeAssignment).count() == 3
    assert db.query(EmployeeDetails).count() == 3
    assert db.query(Attendance).count() == 3
    assert db.query(User).count() == 3


def test_delete_missing_department_raises(db):
    with pytest.raises(NotFoundError):
        service.delete_department(db, 123)


def test_section_delete_removes_assigned_employees(client, org, make_employee):
    assigned = make_employee(password="secret123")
    make_employee(assigned=False)
    client.post("/attendance", json={"employee_id": assigned["assignment_id"], "date": "2025-06-01", "status": "Late"})

    response = client.delete(f"/sections/{org['section_id']}")

    assert response.status_code == 200
    deleted = response.json()["deleted"]
    assert deleted["sections"] == 1
    assert deleted["employees"] == 1
    assert deleted["attendance"] == 1
    assert deleted["users"] == 1
    assert [row["assigned"] for row in client.get("/employees").json()] == [False]
    assert client.get(f"/employees/{assigned['detail_id']}").status_code == 404
    assert len(client.get("/departments").json()) == 1


def test_designation_delete_removes_its_employees(client, org, make_employee):
    make_employee()
    other = client.post("/designations", json={"title": "Tester", "role_id": org["role_id"]}).json()
    kept = make_employee(designation_id=other["id"])

    response = client.delete(f"/designations/{org['designation_id']}")

    assert response.status_code == 200
    assert response.json()["deleted"]["designations"] == 1
    assert response.json()["deleted"]["employees"] == 1
    assert [row["detail_id"] for row in client.get("/employees").json()] == [kept["detail_id"]]
    assert [row["title"] for row in client.get("/designations").json()] == ["Tester"]
    assert len(client.get("/roles").json()) == 1


def test_cascade_blocked_by_foreign_key(db, db_org, monkeypatch):
    _hire(db, db_org, 1)

    def blocked_purge(session, assignment, summary):
        raise IntegrityError("DELETE FROM employee_assignments", {}, Exception("FOREIGN KEY constraint failed"))

    monkeypatch.setattr(service, "_purge_assignment", blocked_purge)

    with pytest.raises(DependencyError) as excinfo:
        service.delete_section(db, db_org["section_id"])

    assert excinfo.value.message == service.CASCADE_BLOCKED
    assert db.query(Section).count() == 1
    assert db.query(EmployeeAssignment).count() == 1
