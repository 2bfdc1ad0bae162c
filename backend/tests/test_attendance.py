from __future__ import annotations

from datetime import date, datetime

from ems.domains.attendance import service
from ems.domains.barcodes.service import set_barcode
from ems.domains.employees.service import add_employee


def _mark(client, employee_id, status="Present", day="2025-06-01", **extra):
    return client.post("/attendance", json={"employee_id": employee_id, "date": day, "status": status, **extra})


def test_add_then_update_keeps_single_row(client, make_employee):
    employee = make_employee()

    first = _mark(client, employee["assignment_id"], "Present")
    second = _mark(client, employee["assignment_id"], "Late", notes="Traffic")

    assert first.json()["result"] == "added"
    assert second.json()["result"] == "updated"
    assert first.json()["id"] == second.json()["id"]

    rows = client.get("/attendance/date/2025-06-01").json()
    assert len(rows) == 1
    assert rows[0]["status"] == "Late"
    assert rows[0]["notes"] == "Traffic"
    assert rows[0]["employee_name"] == "Employee 1"
    assert rows[0]["department_name"] == "Engineering"


def test_hours_worked_from_check_times(client, make_employee):
    employee = make_employee()

    _mark(client, employee["assignment_id"], check_in="09:00:00", check_out="17:30:00")

    rows = client.get(f"/attendance/employee/{employee['assignment_id']}").json()
    assert rows[0]["hours_worked"] == 8.5


def test_attendance_for_unknown_employee(client):
    response = _mark(client, 77)

    assert response.status_code == 404
    assert response.json()["detail"] == "Invalid employee ID. Employee not found in system."


def test_attendance_status_is_validated(client, make_employee):
    employee = make_employee()

    response = _mark(client, employee["assignment_id"], "Sleeping")

    assert response.status_code == 400
    assert "status" in response.json()["detail"]


def test_daily_stats(client, make_employee):
    statuses = ["Present", "Present", "Late", "Absent", "Half Day"]
    for status in statuses:
        _mark(client, make_employee()["assignment_id"], status)

    stats = client.get("/attendance/stats/2025-06-01").json()

    assert stats == {"total": 5, "present": 2, "absent": 1, "late": 1, "half_day": 1}
    assert client.get("/attendance/stats/2025-06-02").json()["total"] == 0


def test_employee_report_date_range(client, make_employee):
    employee = make_employee()
    for day in ("2025-06-01", "2025-06-02", "2025-06-03"):
        _mark(client, employee["assignment_id"], day=day)

    rows = client.get(
        f"/attendance/employee/{employee['assignment_id']}",
        params={"start_date": "2025-06-02", "end_date": "2025-06-03"},
    ).json()

    assert [row["date"] for row in rows] == ["2025-06-03", "2025-06-02"]


def test_delete_attendance(client, make_employee):
    employee = make_employee()
    record_id = _mark(client, employee["assignment_id"]).json()["id"]

    assert client.delete(f"/attendance/{record_id}").status_code == 200
    assert client.delete(f"/attendance/{record_id}").status_code == 404
    assert client.get("/attendance/date/2025-06-01").json() == []


def test_barcode_checkin_is_insert_only(client, make_employee):
    employee = make_employee()
    client.put(f"/barcode/update/{employee['detail_id']}", json={"barcode": "EMP001123"})

    first = client.post("/attendance/barcode", json={"barcode": "EMP001123", "date": "2025-06-01"})
    second = client.post("/attendance/barcode", json={"barcode": "EMP001123", "date": "2025-06-01"})

    assert first.status_code == 200
    assert first.json() == {
        "success": True,
        "message": "Attendance successfully marked for Employee 1",
        "employee_name": "Employee 1",
    }
    assert second.status_code == 200
    assert second.json()["success"] is False
    assert "already marked" in second.json()["message"]
    assert "Present" in second.json()["message"]

    rows = client.get("/attendance/date/2025-06-01").json()
    assert len(rows) == 1
    assert rows[0]["notes"] == "Marked via barcode scan"


def test_barcode_checkin_reports_existing_status(client, make_employee):
    employee = make_employee()
    client.put(f"/barcode/update/{employee['detail_id']}", json={"barcode": "EMP001999"})
    _mark(client, employee["assignment_id"], "Late")

    response = client.post("/attendance/barcode", json={"barcode": "EMP001999", "date": "2025-06-01"})

    assert response.json()["message"] == "Attendance already marked for Employee 1 with status: Late"
    assert client.get("/attendance/date/2025-06-01").json()[0]["status"] == "Late"


def test_unknown_barcode(client):
    response = client.post("/attendance/barcode", json={"barcode": "NOPE"})

    assert response.status_code == 200
    assert response.json()["success"] is False
    assert response.json()["message"].startswith("Employee not found or inactive")


def test_unassigned_employee_cannot_check_in(client, make_employee):
    employee = make_employee(assigned=False)
    client.put(f"/barcode/update/{employee['detail_id']}", json={"barcode": "EMP000555"})

    response = client.post("/attendance/barcode", json={"barcode": "EMP000555"})

    assert response.json()["success"] is False


def test_lookup_employee_by_barcode(client, make_employee):
    employee = make_employee()
    client.put(f"/barcode/update/{employee['detail_id']}", json={"barcode": "EMP001444"})

    found = client.get("/attendance/employee/barcode/EMP001444")

    assert found.status_code == 200
    assert found.json()["emp_id"] == employee["assignment_id"]
    assert client.get("/attendance/employee/barcode/EMP000000").status_code == 404


def test_mark_by_barcode_uses_scan_time(db, db_org):
    details, _ = add_employee(
        db,
        name="Scanner",
        national_id="55555-5555555-5",
        start_date=date(2025, 1, 1),
        email="scan@example.com",
        section_id=db_org["section_id"],
        designation_id=db_org["designation_id"],
    )
    set_barcode(db, details.id, "EMP001000")

    result = service.mark_by_barcode(db, "EMP001000", now=datetime(2025, 6, 1, 8, 59, 30, 1234))

    rows = service.list_by_date(db, date(2025, 6, 1))
    assert result["employee_name"] == "Scanner"
    assert rows[0]["check_in"].isoformat() == "08:59:30"
    assert rows[0]["status"] == "Present"
