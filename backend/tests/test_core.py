from __future__ import annotations

import json
import logging
from datetime import time

import pytest
from sqlalchemy.exc import IntegrityError

from ems.core.errors import (
    DependencyError,
    DuplicateError,
    NotFoundError,
    ServerError,
    classify_integrity_error,
)
from ems.core.logging import configure_logging, get_logger
from ems.core.monitoring import drop_client_errors
from ems.core.security import hash_password, verify_password
from ems.core.timeofday import DEFAULT_WORK_START, parse_time_of_day


class FakePgError(Exception):
    def __init__(self, pgcode):
        super().__init__("constraint violated")
        self.pgcode = pgcode


def _integrity(orig):
    return IntegrityError("INSERT INTO employee_details", {}, orig)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("8:30", time(8, 30)),
        ("08:30:15", time(8, 30, 15)),
        (" 17:00 ", time(17, 0)),
        (time(6, 45), time(6, 45)),
        (None, DEFAULT_WORK_START),
        ("", DEFAULT_WORK_START),
        ("25:00", DEFAULT_WORK_START),
        ("9am", DEFAULT_WORK_START),
    ],
)
def test_parse_time_of_day(value, expected):
    assert parse_time_of_day(value, DEFAULT_WORK_START) == expected


def test_sqlite_messages_are_classified():
    duplicate = classify_integrity_error(
        _integrity(Exception("UNIQUE constraint failed: employee_details.email")), duplicate="taken"
    )
    dependency = classify_integrity_error(_integrity(Exception("FOREIGN KEY constraint failed")))

    assert isinstance(duplicate, DuplicateError)
    assert duplicate.message == "taken"
    assert duplicate.status_code == 400
    assert isinstance(dependency, DependencyError)
    assert dependency.message == "Record is still referenced by other records"


def test_postgres_codes_are_classified():
    assert isinstance(classify_integrity_error(_integrity(FakePgError("23505"))), DuplicateError)
    assert isinstance(classify_integrity_error(_integrity(FakePgError("23503"))), DependencyError)
    assert isinstance(classify_integrity_error(_integrity(FakePgError("23502"))), ServerError)


def test_error_defaults():
    assert NotFoundError().status_code == 404
    assert str(NotFoundError("Employee not found")) == "Employee not found"
    assert ServerError().message == "Server error"


def test_password_hashing():
    hashed = hash_password("secret123")

    assert hashed.startswith("pbkdf2_sha256$")
    assert hashed != hash_password("secret123")
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)
    assert not verify_password("secret123", "plaintext")


def test_monitoring_drops_client_errors():
    event = {"message": "boom"}

    assert drop_client_errors(event, {"exc_info": (NotFoundError, NotFoundError(), None)}) is None
    assert drop_client_errors(event, {"exc_info": (ServerError, ServerError(), None)}) is event
    assert drop_client_errors(event, {"exc_info": (RuntimeError, RuntimeError(), None)}) is event
    assert drop_client_errors(event, {}) is event


def test_log_events_go_through_stdlib_not_stdout(capsys, caplog):
    configure_logging("INFO", json_logs=True)

    with caplog.at_level(logging.INFO):
        get_logger("ems.tests").info("barcode_checkin", employee_id=7)

    assert capsys.readouterr().out == ""
    record = caplog.records[-1]
    assert record.name == "ems.tests"
    payload = json.loads(record.getMessage())
    assert payload["event"] == "barcode_checkin"
    assert payload["employee_id"] == 7
    assert payload["logger"] == "ems.tests"
