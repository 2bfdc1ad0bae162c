from __future__ import annotations

from sqlalchemy.exc import IntegrityError

# SQLSTATE codes raised by PostgreSQL for constraint violations.
PG_UNIQUE_VIOLATION = "23505"
PG_FOREIGN_KEY_VIOLATION = "23503"


class EMSError(Exception):
    """Base class for failures reported to API callers."""

    status_code = 500
    default_message = "Server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(EMSError):
    status_code = 400
    default_message = "Invalid request"


class DuplicateError(EMSError):
    status_code = 400
    default_message = "A record with the same unique value already exists"


class NotFoundError(EMSError):
    status_code = 404
    default_message = "Record not found"


class DependencyError(EMSError):
    status_code = 400
    default_message = "Record is still referenced by other records"


class AlreadyMarkedError(EMSError):
    status_code = 200
    default_message = "Attendance already marked"

    def __init__(self, message: str | None = None, *, employee_name: str | None = None, status: str | None = None) -> None:
        super().__init__(message)
        self.employee_name = employee_name
        self.status = status


class ServerError(EMSError):
    status_code = 500
    default_message = "Server error"


def _sqlstate(exc: IntegrityError) -> str | None:
    orig = exc.orig
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def is_unique_violation(exc: IntegrityError) -> bool:
    if _sqlstate(exc) == PG_UNIQUE_VIOLATION:
        return True
    text = str(exc.orig).lower()
    return "unique constraint" in text or "duplicate key" in text


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    if _sqlstate(exc) == PG_FOREIGN_KEY_VIOLATION:
        return True
    return "foreign key constraint" in str(exc.orig).lower()


def classify_integrity_error(
    exc: IntegrityError,
    duplicate: str | None = None,
    dependency: str | None = None,
) -> EMSError:
    """Map a database constraint failure onto the API error taxonomy."""
    if is_unique_violation(exc):
        return DuplicateError(duplicate)
    if is_foreign_key_violation(exc):
        return DependencyError(dependency)
    return ServerError()
