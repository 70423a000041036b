from __future__ import annotations

from sqlalchemy.exc import IntegrityError

from app.core.exceptions import AppError, IntegrityViolation, SchedulingConflict

EXCLUSION_VIOLATION = "23P01"
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def _sqlstate(exc: IntegrityError) -> str | None:
    orig = exc.orig
    # psycopg 3 exposes sqlstate, psycopg2 pgcode; sqlite has neither.
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def translate_integrity_error(
    exc: IntegrityError,
    *,
    unique_message: str | None = None,
    foreign_key_message: str | None = None,
    overlap_message: str = "This batch already has an overlapping substitution scheduled.",
) -> AppError:
    """Map a store constraint failure to the error the API reports."""
    code = _sqlstate(exc)
    text = str(exc.orig).lower()

    if code == EXCLUSION_VIOLATION or "substitutions_no_overlap" in text:
        return SchedulingConflict(overlap_message)
    if code == UNIQUE_VIOLATION or "unique constraint" in text or "duplicate key" in text:
        return IntegrityViolation(unique_message or "A record with the same unique value already exists.", 409)
    if code == FOREIGN_KEY_VIOLATION or "foreign key" in text:
        return IntegrityViolation(foreign_key_message or "A referenced record does not exist.", 400)
    return IntegrityViolation("The request violates a data integrity rule.", 400)
