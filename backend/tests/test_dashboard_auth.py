from __future__ import annotations


def test_root_and_health(client):
    assert client.get("/").json()["message"] == "Employee Management System API is running"
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/health/db").json() == {"status": "ok", "database": "reachable"}


def test_register_and_login(client):
    registered = client.post(
        "/auth/register",
        json={"username": "hr", "email": "hr@example.com", "password": "secret123", "role": "HR"},
    )

    assert registered.status_code == 201
    by_name = client.post("/auth/login", json={"username": "hr", "password": "secret123"})
    by_email = client.post("/auth/login", json={"username": "HR@example.com", "password": "secret123"})
    assert by_name.status_code == 200
    assert by_name.json()["token"]
    assert by_email.json()["user"]["role"] == "HR"


def test_login_rejects_bad_password(client):
    client.post("/auth/register", json={"username": "a", "email": "a@example.com", "password": "secret123"})

    response = client.post("/auth/login", json={"username": "a", "password": "wrong-pass"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_register_duplicate_email(client):
    payload = {"username": "dup", "email": "dup@example.com", "password": "secret123"}

    client.post("/auth/register", json=payload)
    response = client.post("/auth/register", json=payload)

    assert response.status_code == 400
    assert response.json()["detail"] == "Username or email already exists"


def test_admin_dashboard_counts(client, make_employee):
    make_employee()
    make_employee()
    make_employee(assigned=False)

    stats = client.get("/dashboard/admin").json()

    assert stats == {
        "total_employees": 2,
        "total_departments": 1,
        "total_sections": 1,
        "unassigned_employees": 1,
    }


def test_employee_dashboard_for_unassigned(client, make_employee):
    make_employee(assigned=False, email="new@example.com")

    body = client.get("/dashboard/employee", params={"email": "new@example.com"}).json()

    assert body["emp_id"] is None
    assert body["department_name"] == "Not Assigned"
    assert body["role_name"] == "Employee"
    assert body["work_start_time"] == "09:00:00"


def test_employee_dashboard_for_assigned(client, make_employee):
    make_employee(email="dev@example.com", work_start_time="10:00")

    body = client.get("/dashboard/employee", params={"email": "dev@example.com"}).json()

    assert body["section_name"] == "Backend"
    assert body["role_name"] == "Staff"
    assert body["work_start_time"] == "10:00:00"
    assert client.get("/dashboard/employee", params={"email": "ghost@example.com"}).status_code == 404


def test_employee_dashboard_email_is_case_insensitive(client, make_employee):
    make_employee(email="Mixed.Case@example.com")

    response = client.get("/dashboard/employee", params={"email": " mixed.case@EXAMPLE.com "})

    assert response.status_code == 200
    assert response.json()["email"] == "Mixed.Case@example.com"
