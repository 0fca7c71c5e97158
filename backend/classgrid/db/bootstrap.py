from __future__ import annotations

import logging

from sqlalchemy import inspect

from classgrid.core.config import get_settings
from classgrid.db.base import Base
from classgrid.db.session import engine
import classgrid.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "terms": {"id", "year", "semester", "branch", "sections"},
    "class_sections": {"id", "term_id", "section", "status"},
    "faculty": {"id", "name"},
    "courses": {"id", "code", "name", "short_name", "credits", "is_lab", "term_id"},
    "time_slots": {"id", "day", "period"},
    "teaching_assignments": {"id", "course_id", "faculty_id", "class_id"},
    "faculty_availability": {"id", "faculty_id", "timeslot_id", "is_available"},
    "timetable_entries": {"id", "class_id", "course_id", "faculty_id", "timeslot_id", "room"},
}


def schema_report(connection) -> tuple[list[str], dict[str, list[str]]]:
    inspector = inspect(connection)
    table_names = set(inspector.get_table_names())
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    for table_name, columns in REQUIRED_COLUMNS.items():
        if table_name not in table_names:
            missing_tables.append(table_name)
            continue
        existing = {item["name"] for item in inspector.get_columns(table_name)}
        missing = sorted(columns - existing)
        if missing:
            missing_columns[table_name] = missing
    return missing_tables, missing_columns


def ensure_runtime_schema() -> None:
    settings = get_settings()
    if settings.auto_create_schema:
        Base.metadata.create_all(bind=engine)
        logger.info("Database schema ensured via metadata.create_all")
        return

    try:
        with engine.connect() as connection:
            missing_tables, missing_columns = schema_report(connection)
    except Exception:
        logger.exception("Database schema compatibility check failed")
        return
    if missing_tables or missing_columns:
        logger.warning(
            "Database schema is behind the models | missing_tables=%s | missing_columns=%s | run `alembic upgrade head`",
            missing_tables,
            missing_columns,
        )
