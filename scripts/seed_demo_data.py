"""Seed a small demo term for ClassGrid.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py
"""

from __future__ import annotations

import os
import re

from sqlalchemy import func, select

from classgrid.db.bootstrap import ensure_runtime_schema
from classgrid.db.session import SessionLocal
from classgrid.models.class_section import ClassSection, ClassStatus
from classgrid.models.course import Course
from classgrid.models.faculty import Faculty
from classgrid.models.faculty_availability import FacultyAvailability
from classgrid.models.teaching_assignment import TeachingAssignment
from classgrid.models.term import Term
from classgrid.models.time_slot import TimeSlot
from classgrid.schemas.timetable import DAY_VALUES, PERIOD_VALUES

MOCK_EMAIL_DOMAIN = os.getenv("SEED_MOCK_EMAIL_DOMAIN", "university.edu").strip().lower() or "university.edu"
TERM_YEAR = int(os.getenv("SEED_TERM_YEAR", "2026"))
TERM_SEMESTER = int(os.getenv("SEED_TERM_SEMESTER", "1"))
BRANCH = os.getenv("SEED_BRANCH", "CSE").strip().upper() or "CSE"
SECTION_NAMES = ["A", "B"]

FACULTY_PROFILES = [
    {"name": "Dr. Meera Iyer", "day_off": "saturday"},
    {"name": "Dr. Arjun Nair", "day_off": "friday"},
    {"name": "Prof. Kavya Menon", "day_off": "saturday"},
    {"name": "Prof. Rahul Varma", "day_off": "monday"},
    {"name": "Dr. Divya Pillai", "day_off": None},
]

# code, name, short name, credits, is_lab, faculty index
CURRICULUM = [
    ("23MAT101", "Engineering Mathematics", "MATHS", 3, False, 0),
    ("23CSE101", "Programming Fundamentals", "PF", 3, False, 1),
    ("23CSE102", "Digital Systems", "DS", 3, False, 2),
    ("23ENG101", "Technical Communication", "TC", 2, False, 3),
    ("23CSE181", "Programming Lab", "PF LAB", 3, True, 4),
]


def slugify_name(value: str) -> str:
    cleaned = re.sub(r"^(dr|prof)\.?\s+", "", value.strip().lower())
    return re.sub(r"[^a-z0-9]+", ".", cleaned).strip(".")


def upsert_timeslots(session) -> dict[tuple[str, int], TimeSlot]:
    existing = {(slot.day, slot.period): slot for slot in session.execute(select(TimeSlot)).scalars()}
    for day in DAY_VALUES:
        for period in PERIOD_VALUES:
            if (day, period) not in existing:
                slot = TimeSlot(day=day, period=period)
                session.add(slot)
                existing[(day, period)] = slot
    session.flush()
    return existing


def upsert_term_and_sections(session) -> tuple[Term, list[ClassSection]]:
    term = session.execute(
        select(Term).where(Term.year == TERM_YEAR, Term.semester == TERM_SEMESTER, Term.branch == BRANCH)
    ).scalar_one_or_none()
    if term is None:
        term = Term(year=TERM_YEAR, semester=TERM_SEMESTER, branch=BRANCH, sections=SECTION_NAMES)
        session.add(term)
    else:
        term.sections = SECTION_NAMES
    session.flush()

    sections: list[ClassSection] = []
    for name in SECTION_NAMES:
        section = session.execute(
            select(ClassSection).where(ClassSection.term_id == term.id, ClassSection.section == name)
        ).scalar_one_or_none()
        if section is None:
            section = ClassSection(term_id=term.id, section=name, status=ClassStatus.active)
            session.add(section)
        else:
            section.status = ClassStatus.active
        sections.append(section)
    session.flush()
    return term, sections


def upsert_faculty(session, *, name: str) -> Faculty:
    email = f"{slugify_name(name)}@{MOCK_EMAIL_DOMAIN}"
    existing = session.execute(select(Faculty).where(func.lower(Faculty.email) == email)).scalar_one_or_none()
    if existing is None:
        existing = Faculty(name=name, email=email)
        session.add(existing)
    else:
        existing.name = name
    session.flush()
    return existing


def upsert_availability(session, faculty: Faculty, slots: dict[tuple[str, int], TimeSlot], day_off: str | None) -> None:
    records = {
        record.timeslot_id: record
        for record in session.execute(
            select(FacultyAvailability).where(FacultyAvailability.faculty_id == faculty.id)
        ).scalars()
    }
    for (day, _period), slot in slots.items():
        is_available = day != day_off
        record = records.get(slot.id)
        if record is None:
            session.add(FacultyAvailability(faculty_id=faculty.id, timeslot_id=slot.id, is_available=is_available))
        else:
            record.is_available = is_available
    session.flush()


def upsert_courses_and_assignments(
    session,
    term: Term,
    sections: list[ClassSection],
    faculty: list[Faculty],
) -> None:
    for code, name, short_name, credits, is_lab, faculty_index in CURRICULUM:
        course = session.execute(select(Course).where(Course.code == code)).scalar_one_or_none()
        if course is None:
            course = Course(code=code)
            session.add(course)
        course.name = name
        course.short_name = short_name
        course.credits = credits
        course.is_lab = is_lab
        course.term_id = term.id
        session.flush()

        instructor = faculty[faculty_index]
        for section in sections:
            exists = session.execute(
                select(TeachingAssignment.id).where(
                    TeachingAssignment.course_id == course.id,
                    TeachingAssignment.faculty_id == instructor.id,
                    TeachingAssignment.class_id == section.id,
                )
            ).scalar_one_or_none()
            if exists is None:
                session.add(TeachingAssignment(course_id=course.id, faculty_id=instructor.id, class_id=section.id))
    session.flush()


def main() -> None:
    ensure_runtime_schema()
    with SessionLocal() as session:
        slots = upsert_timeslots(session)
        term, sections = upsert_term_and_sections(session)
        faculty = []
        for profile in FACULTY_PROFILES:
            member = upsert_faculty(session, name=profile["name"])
            upsert_availability(session, member, slots, profile["day_off"])
            faculty.append(member)
        upsert_courses_and_assignments(session, term, sections, faculty)

        session.commit()

        term_id = term.id
        slot_count = session.execute(select(func.count(TimeSlot.id))).scalar_one()
        assignment_count = session.execute(select(func.count(TeachingAssignment.id))).scalar_one()

    print("Demo data seeded successfully.")
    print("")
    print(f"Term: {TERM_YEAR} semester {TERM_SEMESTER} {BRANCH} ({term_id})")
    print(f"Sections: {', '.join(SECTION_NAMES)}")
    print(f"Faculty records: {len(FACULTY_PROFILES)}")
    print(f"Time slots: {slot_count}")
    print(f"Teaching assignments: {assignment_count}")
    print("")
    print("Generate with:")
    print(f'  curl -X POST localhost:8000/api/timetable/generate -H "Content-Type: application/json" '
          f'-d \'{{"scope": "term", "term_id": "{term_id}"}}\'')


if __name__ == "__main__":
    main()
