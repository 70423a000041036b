from __future__ import annotations

import logging

from sqlalchemy import inspect, text

import app.models  # noqa: F401
from app.core.config import get_settings
from app.db.base import Base
from app.db.session import engine

logger = logging.getLogger(__name__)

SUBSTITUTION_OVERLAP_CONSTRAINT = "faculty_substitutions_no_overlap"

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "users": {"id", "username", "role", "faculty_id", "is_active"},
    "faculty": {"id", "name", "email", "employment_type", "is_active"},
    "faculty_availability": {"id", "faculty_id", "day_of_week", "start_time", "end_time"},
    "batches": {"id", "name", "faculty_id", "start_date", "end_date", "start_time", "end_time", "days_of_week"},
    "faculty_substitutions": {
        "id",
        "batch_id",
        "original_faculty_id",
        "substitute_faculty_id",
        "start_date",
        "end_date",
    },
    "student_attendance": {"id", "batch_id", "student_id", "date", "is_present"},
}


def _ensure_substitution_overlap_constraint() -> None:
    with engine.begin() as connection:
        if connection.dialect.name != "postgresql":
            return
        exists = connection.execute(
            text("SELECT 1 FROM pg_constraint WHERE conname = :name"),
            {"name": SUBSTITUTION_OVERLAP_CONSTRAINT},
        ).scalar()
        if exists:
            return
        connection.execute(text("CREATE EXTENSION IF NOT EXISTS btree_gist"))
        connection.execute(
            text(
                "ALTER TABLE faculty_substitutions "
                f"ADD CONSTRAINT {SUBSTITUTION_OVERLAP_CONSTRAINT} "
                "EXCLUDE USING gist (batch_id WITH =, daterange(start_date, end_date, '[]') WITH &&)"
            )
        )
        logger.info("Created exclusion constraint %s", SUBSTITUTION_OVERLAP_CONSTRAINT)


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility() -> None:
    if not get_settings().auto_create_schema:
        logger.info("Schema bootstrap disabled; expecting Alembic-managed schema")
        return
    try:
        Base.metadata.create_all(bind=engine)
        _ensure_substitution_overlap_constraint()
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
