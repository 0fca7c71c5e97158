from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
import logging

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from classgrid.core.exceptions import NotFoundFailure
from classgrid.models.class_section import ClassSection, ClassStatus
from classgrid.models.course import Course
from classgrid.models.faculty import Faculty
from classgrid.models.teaching_assignment import TeachingAssignment
from classgrid.models.term import Term
from classgrid.models.time_slot import TimeSlot
from classgrid.schemas.timetable import DAY_VALUES, PERIOD_VALUES, GenerateTimetableRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CourseInfo:
    id: str
    code: str
    name: str
    short_name: str
    credits: int
    is_lab: bool


@dataclass(frozen=True)
class ClassInfo:
    id: str
    term_id: str
    section: str


@dataclass(frozen=True)
class FacultyInfo:
    id: str
    name: str


@dataclass(frozen=True)
class SlotInfo:
    id: str
    day: str
    period: int


@dataclass(frozen=True)
class AssignmentWork:
    """One (course, faculty, class) demand the scheduler must satisfy in full."""

    assignment_id: str
    course: CourseInfo
    faculty: FacultyInfo
    class_info: ClassInfo

    @property
    def key(self) -> tuple[str, str]:
        return (self.class_info.id, self.course.id)

    @property
    def required_slots(self) -> int:
        return self.course.credits

    @property
    def is_lab(self) -> bool:
        return self.course.is_lab

    def describe(self) -> str:
        return f"{self.course.name} for {self.class_info.section}"


@dataclass
class SchedulingSnapshot:
    scope: str
    term_id: str | None
    courses: dict[str, CourseInfo]
    classes: dict[str, ClassInfo]
    timeslots: list[SlotInfo]
    assignments: list[AssignmentWork]
    slot_by_cell: dict[tuple[str, int], SlotInfo] = field(init=False)

    def __post_init__(self) -> None:
        self.slot_by_cell = {(slot.day, slot.period): slot for slot in self.timeslots}

    @property
    def class_ids(self) -> list[str]:
        seen: dict[str, None] = {}
        for work in self.assignments:
            seen.setdefault(work.class_info.id, None)
        return list(seen)

    @property
    def faculty_ids(self) -> list[str]:
        seen: dict[str, None] = {}
        for work in self.assignments:
            seen.setdefault(work.faculty.id, None)
        return list(seen)

    @property
    def total_required_slots(self) -> int:
        return sum(work.required_slots for work in self.assignments)

    def credits_by_class(self) -> Counter[str]:
        totals: Counter[str] = Counter()
        for work in self.assignments:
            totals[work.class_info.id] += work.required_slots
        return totals

    def slots_needed_by_faculty(self) -> Counter[str]:
        totals: Counter[str] = Counter()
        for work in self.assignments:
            totals[work.faculty.id] += work.required_slots
        return totals

    def slot_at(self, day: str, period: int) -> SlotInfo | None:
        return self.slot_by_cell.get((day, period))


def _canonical_slot_key(slot: SlotInfo) -> tuple[int, int]:
    return (DAY_VALUES.index(slot.day), slot.period)


def _load_timeslots(db: Session) -> list[SlotInfo]:
    slots: list[SlotInfo] = []
    for row in db.execute(select(TimeSlot)).scalars():
        day = (row.day or "").strip().lower()
        if day not in DAY_VALUES or row.period not in PERIOD_VALUES:
            logger.warning("Ignoring timeslot %s outside the weekly grid (%s, %s)", row.id, row.day, row.period)
            continue
        slots.append(SlotInfo(id=row.id, day=day, period=row.period))
    slots.sort(key=_canonical_slot_key)
    return slots


def load_snapshot(db: Session, request: GenerateTimetableRequest, *, max_course_credits: int = 3) -> SchedulingSnapshot:
    """Read everything a run needs for the requested batch scope.

    Raises NotFoundFailure when the scope has no term, classes, courses,
    timeslots or teaching assignments.
    """
    term_id: str | None = None
    if request.scope == "term":
        term = db.get(Term, request.term_id)
        if term is None:
            raise NotFoundFailure(f"Term with id {request.term_id} not found")
        term_id = term.id

    course_query = select(Course)
    class_query = select(ClassSection).where(ClassSection.status == ClassStatus.active)
    if term_id is not None:
        course_query = course_query.where(or_(Course.term_id == term_id, Course.term_id.is_(None)))
        class_query = class_query.where(ClassSection.term_id == term_id)

    courses = {
        row.id: CourseInfo(
            id=row.id,
            code=row.code,
            name=row.name,
            short_name=row.short_name,
            credits=row.credits,
            is_lab=bool(row.is_lab),
        )
        for row in db.execute(course_query).scalars()
    }
    classes = {
        row.id: ClassInfo(id=row.id, term_id=row.term_id, section=row.section)
        for row in db.execute(class_query.order_by(ClassSection.section, ClassSection.id)).scalars()
    }
    timeslots = _load_timeslots(db)

    if not classes:
        raise NotFoundFailure("No classes found for the requested scope")
    if not courses:
        raise NotFoundFailure("No courses found for the requested scope")
    if not timeslots:
        raise NotFoundFailure("No timeslots found in the system")

    rows = db.execute(
        select(TeachingAssignment, Course, Faculty, ClassSection)
        .join(Course, Course.id == TeachingAssignment.course_id)
        .join(Faculty, Faculty.id == TeachingAssignment.faculty_id)
        .join(ClassSection, ClassSection.id == TeachingAssignment.class_id)
        .where(TeachingAssignment.class_id.in_(list(classes)))
        .order_by(TeachingAssignment.created_at, TeachingAssignment.id)
    ).all()

    assignments: list[AssignmentWork] = []
    for assignment, course, faculty, class_section in rows:
        course_info = courses.get(course.id) or CourseInfo(
            id=course.id,
            code=course.code,
            name=course.name,
            short_name=course.short_name,
            credits=course.credits,
            is_lab=bool(course.is_lab),
        )
        if not 1 <= course_info.credits <= max_course_credits:
            logger.warning(
                "Course %s has %s credits (expected 1-%s); scheduling it as-is",
                course_info.code,
                course_info.credits,
                max_course_credits,
            )
        assignments.append(
            AssignmentWork(
                assignment_id=assignment.id,
                course=course_info,
                faculty=FacultyInfo(id=faculty.id, name=faculty.name),
                class_info=classes[class_section.id],
            )
        )

    if not assignments:
        raise NotFoundFailure("No valid teaching assignments found for the requested scope")

    snapshot = SchedulingSnapshot(
        scope=request.scope,
        term_id=term_id,
        courses=courses,
        classes=classes,
        timeslots=timeslots,
        assignments=assignments,
    )
    logger.info(
        "SNAPSHOT LOADED | scope=%s | term_id=%s | courses=%s | classes=%s | timeslots=%s | assignments=%s | faculty=%s",
        snapshot.scope,
        snapshot.term_id,
        len(courses),
        len(snapshot.class_ids),
        len(timeslots),
        len(assignments),
        len(snapshot.faculty_ids),
    )
    return snapshot
