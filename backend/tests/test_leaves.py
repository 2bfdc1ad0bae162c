from __future__ import annotations

from datetime import date

import pytest

from ems.domains.leaves.service import days_requested


def _apply(client, employee_id, start="2025-01-01", end="2025-01-03", leave_type="holiday"):
    return client.post(
        "/leaves",
        json={
            "employee_id": employee_id,
            "leave_type": leave_type,
            "start_date": start,
            "end_date": end,
            "reason": "Personal",
        },
    )


@pytest.fixture
def leave(client, make_employee):
    employee = make_employee()
    response = _apply(client, employee["assignment_id"])
    assert response.status_code == 201
    return {"id": response.json()["leave_id"], "employee_id": employee["assignment_id"]}


def test_day_count_is_inclusive():
    assert days_requested(date(2025, 1, 1), date(2025, 1, 3)) == 3
    assert days_requested(date(2025, 1, 1), date(2025, 1, 1)) == 1


def test_apply_leave(client, make_employee):
    employee = make_employee()

    response = _apply(client, employee["assignment_id"])

    assert response.json()["days_requested"] == 3
    leave = client.get(f"/leaves/{response.json()['leave_id']}").json()
    assert leave["status"] == "pending"
    assert leave["employee_name"] == "Employee 1"
    assert leave["designation_title"] == "Developer"


def test_end_before_start_rejected(client, make_employee):
    employee = make_employee()

    response = _apply(client, employee["assignment_id"], start="2025-01-05", end="2025-01-03")

    assert response.status_code == 400
    assert response.json()["detail"] == "End date cannot be before start date"


def test_apply_for_unknown_employee(client):
    assert _apply(client, 99).status_code == 404


def test_unknown_leave_type_rejected(client, make_employee):
    employee = make_employee()

    assert _apply(client, employee["assignment_id"], leave_type="sabbatical").status_code == 400


def test_decision_is_final(client, leave):
    approve = client.put(f"/leaves/{leave['id']}/status", json={"status": "approved", "approved_by": 1})
    again = client.put(f"/leaves/{leave['id']}/status", json={"status": "approved", "approved_by": 1})
    reject = client.put(f"/leaves/{leave['id']}/status", json={"status": "rejected", "approved_by": 1})

    assert approve.status_code == 200
    assert approve.json()["approved_by"] == 1
    assert approve.json()["approved_date"] is not None
    assert again.status_code == 200
    assert reject.status_code == 400
    assert reject.json()["detail"] == "Leave application is already approved"


def test_viewed_can_still_be_decided(client, leave):
    client.put(f"/leaves/{leave['id']}/status", json={"status": "viewed", "approved_by": 1})

    response = client.put(
        f"/leaves/{leave['id']}/status",
        json={"status": "rejected", "approved_by": 1, "comments": "Busy week"},
    )

    assert response.json()["status"] == "rejected"
    assert response.json()["comments"] == "Busy week"


def test_filter_and_employee_listing(client, leave):
    client.put(f"/leaves/{leave['id']}/status", json={"status": "approved", "approved_by": 1})

    assert len(client.get("/leaves", params={"status": "approved"}).json()) == 1
    assert client.get("/leaves", params={"status": "pending"}).json() == []
    assert len(client.get(f"/leaves/employee/{leave['employee_id']}").json()) == 1


def test_stats(client, make_employee):
    employee = make_employee()
    first = _apply(client, employee["assignment_id"]).json()["leave_id"]
    _apply(client, employee["assignment_id"], start="2025-02-01", end="2025-02-01")
    client.put(f"/leaves/{first}/status", json={"status": "approved", "approved_by": 1})

    stats = client.get("/leaves/stats").json()

    assert stats == {"total": 2, "pending": 1, "approved": 1, "rejected": 0, "viewed": 0, "approved_days": 3}


def test_only_applicant_can_withdraw(client, leave):
    response = client.delete(f"/leaves/{leave['id']}", params={"employee_id": leave["employee_id"] + 1})

    assert response.status_code == 400
    assert response.json()["detail"] == "Leave application belongs to another employee"


def test_decided_leave_cannot_be_withdrawn(client, leave):
    client.put(f"/leaves/{leave['id']}/status", json={"status": "approved", "approved_by": 1})

    response = client.delete(f"/leaves/{leave['id']}", params={"employee_id": leave["employee_id"]})

    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete a leave application that is approved"


def test_withdraw_pending_leave(client, leave):
    response = client.delete(f"/leaves/{leave['id']}", params={"employee_id": leave["employee_id"]})

    assert response.status_code == 200
    assert client.get(f"/leaves/{leave['id']}").status_code == 404


def test_restating_decision_changes_nothing(client, leave):
    first = client.put(
        f"/leaves/{leave['id']}/status",
        json={"status": "approved", "approved_by": 1, "comments": "ok"},
    ).json()

    second = client.put(
        f"/leaves/{leave['id']}/status",
        json={"status": "approved", "approved_by": 2, "comments": "changed"},
    )

    assert second.status_code == 200
    body = second.json()
    assert body["approved_by"] == 1
    assert body["comments"] == "ok"
    assert body["approved_date"] == first["approved_date"]
