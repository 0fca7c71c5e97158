from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from classgrid.core.exceptions import NotFoundFailure
from classgrid.models.class_section import ClassSection
from classgrid.models.course import Course
from classgrid.models.faculty import Faculty
from classgrid.models.time_slot import TimeSlot
from classgrid.models.timetable_entry import TimetableEntry
from classgrid.schemas.timetable import (
    DAY_VALUES,
    PERIOD_VALUES,
    ClassGridOut,
    GridCell,
    TermTimetableOut,
    TimetableEntryOut,
)


def _empty_grid() -> list[list[GridCell | None]]:
    return [[None for _ in DAY_VALUES] for _ in PERIOD_VALUES]


def build_term_timetable(db: Session, term_id: str) -> TermTimetableOut:
    classes = list(
        db.execute(
            select(ClassSection).where(ClassSection.term_id == term_id).order_by(ClassSection.section)
        ).scalars()
    )
    if not classes:
        raise NotFoundFailure(f"No classes found for term {term_id}")

    grids = {
        item.id: ClassGridOut(class_id=item.id, section=item.section, grid=_empty_grid()) for item in classes
    }
    rows = db.execute(
        select(TimetableEntry, Course, Faculty, TimeSlot)
        .join(Course, Course.id == TimetableEntry.course_id)
        .join(Faculty, Faculty.id == TimetableEntry.faculty_id)
        .join(TimeSlot, TimeSlot.id == TimetableEntry.timeslot_id)
        .where(TimetableEntry.class_id.in_(list(grids)))
    ).all()
    for entry, course, faculty, slot in rows:
        day = slot.day.strip().lower()
        if day not in DAY_VALUES or slot.period not in PERIOD_VALUES:
            continue
        grids[entry.class_id].grid[PERIOD_VALUES.index(slot.period)][DAY_VALUES.index(day)] = GridCell(
            course_id=course.id,
            course_name=course.name,
            faculty_id=faculty.id,
            faculty_name=faculty.name,
            room=entry.room,
            is_lab=course.is_lab,
        )
    return TermTimetableOut(term_id=term_id, classes=list(grids.values()))


def list_class_entries(db: Session, class_id: str) -> list[TimetableEntryOut]:
    if db.get(ClassSection, class_id) is None:
        raise NotFoundFailure(f"Class with id {class_id} not found")
    rows = db.execute(
        select(TimetableEntry, TimeSlot)
        .join(TimeSlot, TimeSlot.id == TimetableEntry.timeslot_id)
        .where(TimetableEntry.class_id == class_id)
    ).all()
    entries = [
        TimetableEntryOut(
            class_id=entry.class_id,
            course_id=entry.course_id,
            faculty_id=entry.faculty_id,
            timeslot_id=entry.timeslot_id,
            day=slot.day.strip().lower(),
            period=slot.period,
            room=entry.room or "",
        )
        for entry, slot in rows
    ]
    entries.sort(key=lambda item: (DAY_VALUES.index(item.day) if item.day in DAY_VALUES else len(DAY_VALUES), item.period))
    return entries
