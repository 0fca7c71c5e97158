from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass

from classgrid.schemas.timetable import DAY_VALUES, PERIOD_VALUES
from classgrid.services.availability import AvailabilityManager
from classgrid.services.data_loader import AssignmentWork, SlotInfo


def room_label(class_id: str, slot_id: str) -> str:
    return f"Room-{class_id}-{slot_id}"


@dataclass(frozen=True)
class EntryDraft:
    class_id: str
    course_id: str
    faculty_id: str
    timeslot_id: str
    day: str
    period: int
    room: str


@dataclass(frozen=True)
class Placement:
    """A single journal unit: one period for a lecture, the whole block for a lab."""

    work: AssignmentWork
    day: str
    slots: tuple[SlotInfo, ...]

    def entries(self) -> list[EntryDraft]:
        class_id = self.work.class_info.id
        return [
            EntryDraft(
                class_id=class_id,
                course_id=self.work.course.id,
                faculty_id=self.work.faculty.id,
                timeslot_id=slot.id,
                day=slot.day,
                period=slot.period,
                room=room_label(class_id, slot.id),
            )
            for slot in self.slots
        ]


class SchedulingState:
    """Mutable search state owned by a single run.

    All mutation goes through place(); checkpoint() returns a journal mark and
    rollback(mark) undoes every placement made after it, newest first.
    """

    def __init__(
        self,
        class_ids: list[str],
        availability: AvailabilityManager,
        *,
        days: tuple[str, ...] = DAY_VALUES,
        periods: tuple[int, ...] = PERIOD_VALUES,
    ) -> None:
        self.availability = availability
        self.days = days
        self.periods = periods
        self._period_index = {period: index for index, period in enumerate(periods)}
        self._grid: dict[tuple[str, str], list[str | None]] = {
            (class_id, day): [None] * len(periods) for class_id in class_ids for day in days
        }
        self._day_course_count: Counter[tuple[str, str, str]] = Counter()
        self._course_days: dict[tuple[str, str], set[str]] = defaultdict(set)
        self._assigned: Counter[tuple[str, str]] = Counter()
        self._journal: list[Placement] = []
        self.slots_assigned = 0

    # -- queries -------------------------------------------------------

    def cell_is_empty(self, class_id: str, day: str, period: int) -> bool:
        row = self._grid.get((class_id, day))
        index = self._period_index.get(period)
        if row is None or index is None:
            return False
        return row[index] is None

    def cell(self, class_id: str, day: str, period: int) -> str | None:
        row = self._grid.get((class_id, day))
        index = self._period_index.get(period)
        if row is None or index is None:
            return None
        return row[index]

    def day_count(self, class_id: str, day: str, course_id: str) -> int:
        return self._day_course_count[(class_id, day, course_id)]

    def days_used(self, class_id: str, course_id: str) -> int:
        return len(self._course_days.get((class_id, course_id), ()))

    def assigned(self, class_id: str, course_id: str) -> int:
        return self._assigned[(class_id, course_id)]

    def is_satisfied(self, work: AssignmentWork) -> bool:
        return self.assigned(*work.key) >= work.required_slots

    @property
    def placements(self) -> tuple[Placement, ...]:
        return tuple(self._journal)

    def entries(self) -> list[EntryDraft]:
        drafts: list[EntryDraft] = []
        for placement in self._journal:
            drafts.extend(placement.entries())
        return drafts

    # -- mutation ------------------------------------------------------

    def checkpoint(self) -> int:
        return len(self._journal)

    def place(self, placement: Placement) -> None:
        work = placement.work
        class_id, course_id = work.key
        row = self._grid[(class_id, placement.day)]
        for slot in placement.slots:
            index = self._period_index[slot.period]
            if row[index] is not None:
                raise ValueError(f"Cell {placement.day}/{slot.period} of class {class_id} is already taken")
            self.availability.book(work.faculty.id, slot.id)
            row[index] = course_id
            self._day_course_count[(class_id, placement.day, course_id)] += 1
            self._assigned[(class_id, course_id)] += 1
            self.slots_assigned += 1
        self._course_days[(class_id, course_id)].add(placement.day)
        self._journal.append(placement)

    def rollback(self, mark: int) -> None:
        while len(self._journal) > mark:
            self._undo(self._journal.pop())

    def _undo(self, placement: Placement) -> None:
        work = placement.work
        class_id, course_id = work.key
        row = self._grid[(class_id, placement.day)]
        for slot in placement.slots:
            row[self._period_index[slot.period]] = None
            self.availability.release(work.faculty.id, slot.id)
            self._day_course_count[(class_id, placement.day, course_id)] -= 1
            self._assigned[(class_id, course_id)] -= 1
            self.slots_assigned -= 1
        if self._day_course_count[(class_id, placement.day, course_id)] <= 0:
            del self._day_course_count[(class_id, placement.day, course_id)]
            self._course_days[(class_id, course_id)].discard(placement.day)
