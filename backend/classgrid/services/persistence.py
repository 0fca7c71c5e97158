from __future__ import annotations

from collections import defaultdict
import logging

from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from classgrid.core.exceptions import PersistenceFailure
from classgrid.models.faculty_availability import FacultyAvailability
from classgrid.models.timetable_entry import TimetableEntry
from classgrid.services.state import EntryDraft

logger = logging.getLogger(__name__)


def consumed_slots_by_faculty(entries: list[EntryDraft]) -> dict[str, list[str]]:
    consumed: dict[str, list[str]] = defaultdict(list)
    for entry in entries:
        consumed[entry.faculty_id].append(entry.timeslot_id)
    return dict(consumed)


def commit_schedule(
    db: Session,
    *,
    run_id: str,
    class_ids: list[str],
    entries: list[EntryDraft],
) -> int:
    """Replace the batch's timetable and close the consumed availability slots.

    Writes are flushed but not committed; the caller owns the transaction.
    """
    try:
        deleted = db.execute(
            delete(TimetableEntry)
            .where(TimetableEntry.class_id.in_(class_ids))
            .execution_options(synchronize_session=False)
        ).rowcount
        db.add_all(
            [
                TimetableEntry(
                    class_id=entry.class_id,
                    course_id=entry.course_id,
                    faculty_id=entry.faculty_id,
                    timeslot_id=entry.timeslot_id,
                    room=entry.room,
                    run_id=run_id,
                )
                for entry in entries
            ]
        )
        db.flush()

        flipped = 0
        for faculty_id, slot_ids in consumed_slots_by_faculty(entries).items():
            flipped += db.execute(
                update(FacultyAvailability)
                .where(
                    FacultyAvailability.faculty_id == faculty_id,
                    FacultyAvailability.timeslot_id.in_(slot_ids),
                )
                .values(is_available=False)
                .execution_options(synchronize_session=False)
            ).rowcount
    except SQLAlchemyError as exc:
        raise PersistenceFailure("Failed to persist generated timetable", details={"run_id": run_id}) from exc

    logger.info(
        "TIMETABLE PERSISTED | run_id=%s | classes=%s | deleted=%s | inserted=%s | availability_closed=%s",
        run_id,
        len(class_ids),
        deleted,
        len(entries),
        flipped,
    )
    return len(entries)
