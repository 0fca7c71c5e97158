"""Feasibility predicates for placing a teaching assignment in the weekly grid.

Every predicate is read-only with respect to the SchedulingState.
"""
from __future__ import annotations

from collections.abc import Sequence

from classgrid.services.data_loader import SlotInfo
from classgrid.services.state import SchedulingState

MAX_DAILY_SESSIONS = 2


def max_spread_days(required_slots: int, day_count: int) -> int:
    return min(required_slots, day_count)


def slot_is_open(
    state: SchedulingState,
    *,
    class_id: str,
    faculty_id: str,
    slot: SlotInfo | None,
) -> bool:
    """Grid cell empty, faculty not booked anywhere, and faculty marked available."""
    if slot is None:
        return False
    if not state.cell_is_empty(class_id, slot.day, slot.period):
        return False
    if state.availability.is_booked(faculty_id, slot.id):
        return False
    return state.availability.is_available(faculty_id, slot.id)


def can_place(
    state: SchedulingState,
    *,
    class_id: str,
    slot: SlotInfo | None,
    faculty_id: str,
    course_id: str,
    is_lab: bool,
    required_slots: int,
) -> bool:
    if not slot_is_open(state, class_id=class_id, faculty_id=faculty_id, slot=slot):
        return False
    if is_lab:
        return True

    count_today = state.day_count(class_id, slot.day, course_id)
    if count_today >= MAX_DAILY_SESSIONS:
        return False

    # A second session on the same day is only allowed once every day the
    # course can spread over has been used.
    days_used = state.days_used(class_id, course_id)
    spread_not_full = days_used < max_spread_days(required_slots, len(state.days))
    if count_today > 0 and spread_not_full:
        return False
    return True


def lab_window_is_open(
    state: SchedulingState,
    *,
    class_id: str,
    faculty_id: str,
    window: Sequence[SlotInfo | None],
) -> bool:
    """True when every period of a contiguous lab window can be taken."""
    if not window:
        return False
    return all(slot_is_open(state, class_id=class_id, faculty_id=faculty_id, slot=slot) for slot in window)
