from __future__ import annotations

from datetime import date

import pytest

from ems import cli
from ems.core.security import verify_password
from ems.db.session import Database
from ems.domains.employees.service import add_employee
from ems.models import Department, Designation, LeavePolicy, OvertimePolicy, TaxPolicy, User


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'ems.db'}"


def test_init_db_and_seed(capsys, database_url):
    cli.main(["--database-url", database_url, "init-db"])
    cli.main(["--database-url", database_url, "seed", "--admin-email", "root@example.com"])
    # seeding again does not duplicate reference rows
    cli.main(["--database-url", database_url, "seed", "--admin-email", "root@example.com"])

    output = capsys.readouterr().out
    assert "Created database tables" in output
    assert "admin account root@example.com" in output

    with Database(database_url).session() as db:
        assert db.query(Department).count() == 3
        assert db.query(Designation).count() == 5
        assert db.query(OvertimePolicy).count() == 1
        assert db.query(LeavePolicy).count() == 1
        assert db.query(TaxPolicy).count() == 1
        admin = db.query(User).filter(User.email == "root@example.com").one()
        assert admin.role == "Admin"


def test_create_admin_resets_password(capsys, database_url):
    cli.main(["--database-url", database_url, "init-db"])
    cli.main(["--database-url", database_url, "create-admin", "boss@example.com", "first-pass"])
    cli.main(["--database-url", database_url, "create-admin", "boss@example.com", "second-pass"])

    assert "Admin account ready: boss@example.com" in capsys.readouterr().out
    with Database(database_url).session() as db:
        admins = db.query(User).all()
        assert len(admins) == 1
        assert verify_password("second-pass", admins[0].hashed_password)


def test_generate_barcodes_for_assigned_employees(capsys, database_url):
    cli.main(["--database-url", database_url, "init-db"])
    cli.main(["--database-url", database_url, "seed"])
    with Database(database_url).session() as db:
        for n, assigned in ((1, True), (2, False)):
            add_employee(
                db,
                name=f"Person {n}",
                national_id=f"66666-000000{n}-6",
                start_date=date(2025, 1, 1),
                email=f"person{n}@example.com",
                section_id=1 if assigned else None,
                designation_id=1 if assigned else None,
            )
    capsys.readouterr()

    cli.main(["--database-url", database_url, "generate-barcodes"])

    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[-1] == "Generated 1 barcodes"
    assert lines[0].startswith("1 EMP001")


def test_command_is_required():
    with pytest.raises(SystemExit):
        cli.main([])


def test_serve_runs_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))

    cli.main(["serve", "--port", "9000"])

    assert calls == [("ems.main:app", {"host": "0.0.0.0", "port": 9000, "reload": False})]
