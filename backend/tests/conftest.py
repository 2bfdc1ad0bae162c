from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from ems.db.session import Database
from ems.domains.hierarchy import service as hierarchy
from ems.main import create_app


@pytest.fixture
def database():
    database = Database("sqlite://", poolclass=StaticPool)
    database.create_all()
    yield database
    database.drop_all()
    database.dispose()


@pytest.fixture
def db(database):
    session = database.new_session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(database):
    with TestClient(create_app(database)) as client:
        yield client


@pytest.fixture
def org(client):
    """One department/section and one role/designation, created through the API."""
    department = client.post("/departments", json={"name": "Engineering"}).json()
    section = client.post("/sections", json={"name": "Backend", "department_id": department["id"]}).json()
    role = client.post("/roles", json={"name": "Staff"}).json()
    designation = client.post("/designations", json={"title": "Developer", "role_id": role["id"]}).json()
    return {
        "department_id": department["id"],
        "section_id": section["id"],
        "role_id": role["id"],
        "designation_id": designation["id"],
    }


@pytest.fixture
def db_org(db):
    department = hierarchy.add_department(db, "Engineering")
    section = hierarchy.add_section(db, "Backend", department.id)
    role = hierarchy.add_role(db, "Staff")
    designation = hierarchy.add_designation(db, "Developer", role.id)
    return {
        "department_id": department.id,
        "section_id": section.id,
        "role_id": role.id,
        "designation_id": designation.id,
    }


@pytest.fixture
def make_employee(client, org):
    counter = {"n": 0}

    def _make(assigned: bool = True, **overrides):
        counter["n"] += 1
        n = counter["n"]
        payload = {
            "name": f"Employee {n}",
            "national_id": f"35202-{n:07d}-1",
            "start_date": "2025-01-01",
            "email": f"employee{n}@example.com",
        }
        if assigned:
            payload.update(section_id=org["section_id"], designation_id=org["designation_id"])
        payload.update(overrides)
        response = client.post("/employees", json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
