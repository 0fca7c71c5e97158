from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from classgrid.models.faculty_availability import FacultyAvailability
from classgrid.models.timetable_entry import TimetableEntry

logger = logging.getLogger(__name__)


class AvailabilityManager:
    """Per-faculty ledger of open slots and globally booked slots for one run.

    A slot is free for a faculty when its availability record is true and no
    timetable entry (from a class outside the batch, or placed during this
    run) already holds it.
    """

    def __init__(
        self,
        available: dict[str, Iterable[str]] | None = None,
        booked: dict[str, Iterable[str]] | None = None,
    ) -> None:
        self._available: dict[str, set[str]] = defaultdict(set)
        self._booked: dict[str, set[str]] = defaultdict(set)
        for faculty_id, slot_ids in (available or {}).items():
            self._available[faculty_id].update(slot_ids)
        for faculty_id, slot_ids in (booked or {}).items():
            self._booked[faculty_id].update(slot_ids)

    @classmethod
    def load(
        cls,
        db: Session,
        *,
        faculty_ids: list[str],
        batch_class_ids: list[str],
    ) -> "AvailabilityManager":
        manager = cls()
        if not faculty_ids:
            return manager

        records = db.execute(
            select(FacultyAvailability.faculty_id, FacultyAvailability.timeslot_id).where(
                FacultyAvailability.faculty_id.in_(faculty_ids),
                FacultyAvailability.is_available.is_(True),
            )
        ).all()
        for faculty_id, timeslot_id in records:
            manager._available[faculty_id].add(timeslot_id)

        # Entries of batch classes are about to be replaced, so they do not block.
        existing_query = select(TimetableEntry.faculty_id, TimetableEntry.timeslot_id).where(
            TimetableEntry.faculty_id.in_(faculty_ids)
        )
        if batch_class_ids:
            existing_query = existing_query.where(TimetableEntry.class_id.not_in(batch_class_ids))
        existing = db.execute(existing_query).all()
        for faculty_id, timeslot_id in existing:
            manager._booked[faculty_id].add(timeslot_id)

        logger.info(
            "AVAILABILITY LOADED | faculty=%s | available_records=%s | external_bookings=%s",
            len(faculty_ids),
            len(records),
            len(existing),
        )
        return manager

    def is_available(self, faculty_id: str, slot_id: str) -> bool:
        return slot_id in self._available.get(faculty_id, ())

    def is_booked(self, faculty_id: str, slot_id: str) -> bool:
        return slot_id in self._booked.get(faculty_id, ())

    def is_free(self, faculty_id: str, slot_id: str) -> bool:
        return self.is_available(faculty_id, slot_id) and not self.is_booked(faculty_id, slot_id)

    def available_count(self, faculty_id: str) -> int:
        return len(self._available.get(faculty_id, ()))

    def booked_slots(self, faculty_id: str) -> frozenset[str]:
        return frozenset(self._booked.get(faculty_id, ()))

    def book(self, faculty_id: str, slot_id: str) -> None:
        bucket = self._booked[faculty_id]
        if slot_id in bucket:
            raise ValueError(f"Faculty {faculty_id} already holds slot {slot_id}")
        bucket.add(slot_id)

    def release(self, faculty_id: str, slot_id: str) -> None:
        self._booked[faculty_id].discard(slot_id)


def reset_availability(db: Session, faculty_ids: list[str]) -> int:
    """Mark every availability record of the given faculties as available.

    Runs inside the caller's transaction; a later failure rolls it back.
    """
    if not faculty_ids:
        return 0
    result = db.execute(
        update(FacultyAvailability)
        .where(FacultyAvailability.faculty_id.in_(faculty_ids))
        .values(is_available=True)
        .execution_options(synchronize_session=False)
    )
    logger.info("AVAILABILITY RESET | faculty=%s | records=%s", len(faculty_ids), result.rowcount)
    return result.rowcount
