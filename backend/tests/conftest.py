import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from classgrid.api.deps import get_db
from classgrid.db.base import Base
from classgrid.main import app
from classgrid.models import (
    ClassSection,
    ClassStatus,
    Course,
    Faculty,
    FacultyAvailability,
    TeachingAssignment,
    Term,
    TimeSlot,
    TimetableEntry,
)
from classgrid.schemas.timetable import DAY_VALUES, PERIOD_VALUES
from classgrid.services.availability import AvailabilityManager
from classgrid.services.data_loader import (
    AssignmentWork,
    ClassInfo,
    CourseInfo,
    FacultyInfo,
    SchedulingSnapshot,
    SlotInfo,
)
from classgrid.services.state import SchedulingState


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


class Seeder:
    """Writes scheduling records straight through the ORM."""

    def __init__(self, db):
        self.db = db
        self._clock = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)
        self.slots: dict[tuple[str, int], str] = {}

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def timeslots(self, days=DAY_VALUES, periods=PERIOD_VALUES) -> dict[tuple[str, int], str]:
        for day in days:
            for period in periods:
                slot = TimeSlot(day=day, period=period)
                self.db.add(slot)
                self.db.flush()
                self.slots[(day, period)] = slot.id
        return self.slots

    def term(self, *, year=2026, semester=1, branch="CSE", sections=("A",)) -> Term:
        term = Term(year=year, semester=semester, branch=branch, sections=list(sections))
        self.db.add(term)
        self.db.flush()
        return term

    def class_section(self, term: Term, section: str, *, status=ClassStatus.active) -> ClassSection:
        item = ClassSection(term_id=term.id, section=section, status=status)
        self.db.add(item)
        self.db.flush()
        return item

    def faculty(self, name: str) -> Faculty:
        item = Faculty(name=name)
        self.db.add(item)
        self.db.flush()
        return item

    def course(self, code: str, *, credits=3, is_lab=False, term_id=None, name=None) -> Course:
        item = Course(
            code=code,
            name=name or f"Course {code}",
            short_name=code,
            credits=credits,
            is_lab=is_lab,
            term_id=term_id,
        )
        self.db.add(item)
        self.db.flush()
        return item

    def assign(self, course: Course, faculty: Faculty, class_section: ClassSection) -> TeachingAssignment:
        # Explicit timestamps keep discovery order stable on second-resolution clocks.
        item = TeachingAssignment(
            course_id=course.id,
            faculty_id=faculty.id,
            class_id=class_section.id,
            created_at=self._tick(),
        )
        self.db.add(item)
        self.db.flush()
        return item

    def availability(self, faculty: Faculty, cells=None, *, is_available=True) -> list[FacultyAvailability]:
        keys = list(self.slots) if cells is None else list(cells)
        records = [
            FacultyAvailability(faculty_id=faculty.id, timeslot_id=self.slots[key], is_available=is_available)
            for key in keys
        ]
        self.db.add_all(records)
        self.db.flush()
        return records

    def entry(self, class_section: ClassSection, course: Course, faculty: Faculty, cell) -> TimetableEntry:
        item = TimetableEntry(
            class_id=class_section.id,
            course_id=course.id,
            faculty_id=faculty.id,
            timeslot_id=self.slots[cell],
            room="Room-existing",
        )
        self.db.add(item)
        self.db.flush()
        return item

    def commit(self) -> None:
        self.db.commit()


@pytest.fixture()
def seed(db_session):
    return Seeder(db_session)


@pytest.fixture()
def slot_grid() -> list[SlotInfo]:
    return [
        SlotInfo(id=f"ts-{day[:3]}-{period}", day=day, period=period) for day in DAY_VALUES for period in PERIOD_VALUES
    ]


class WorkFactory:
    def __init__(self):
        self._counter = 0

    def __call__(
        self,
        *,
        class_id="c-1",
        course_id="co-1",
        faculty_id="f-1",
        credits=3,
        is_lab=False,
        section=None,
        faculty_name=None,
    ) -> AssignmentWork:
        self._counter += 1
        return AssignmentWork(
            assignment_id=f"a-{self._counter}",
            course=CourseInfo(
                id=course_id,
                code=course_id.upper(),
                name=f"Course {course_id}",
                short_name=course_id,
                credits=credits,
                is_lab=is_lab,
            ),
            faculty=FacultyInfo(id=faculty_id, name=faculty_name or f"Prof {faculty_id}"),
            class_info=ClassInfo(id=class_id, term_id="t-1", section=section or class_id.upper()),
        )


@pytest.fixture()
def make_work() -> WorkFactory:
    return WorkFactory()


@pytest.fixture()
def build_snapshot(slot_grid):
    def _build(works: list[AssignmentWork], timeslots: list[SlotInfo] | None = None) -> SchedulingSnapshot:
        return SchedulingSnapshot(
            scope="all",
            term_id=None,
            courses={work.course.id: work.course for work in works},
            classes={work.class_info.id: work.class_info for work in works},
            timeslots=list(timeslots or slot_grid),
            assignments=list(works),
        )

    return _build


@pytest.fixture()
def open_availability(slot_grid):
    def _open(faculty_ids, *, slots=None, booked=None) -> AvailabilityManager:
        slot_ids = [slot.id for slot in (slots if slots is not None else slot_grid)]
        return AvailabilityManager(
            available={faculty_id: slot_ids for faculty_id in faculty_ids},
            booked=booked,
        )

    return _open


@pytest.fixture()
def build_state():
    def _build(snapshot: SchedulingSnapshot, availability: AvailabilityManager) -> SchedulingState:
        return SchedulingState(snapshot.class_ids, availability)

    return _build
