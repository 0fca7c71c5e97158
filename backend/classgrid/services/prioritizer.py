from __future__ import annotations

import logging

from classgrid.services.constraints import slot_is_open
from classgrid.services.data_loader import AssignmentWork, SchedulingSnapshot
from classgrid.services.state import SchedulingState

logger = logging.getLogger(__name__)


def possible_slot_count(work: AssignmentWork, snapshot: SchedulingSnapshot, state: SchedulingState) -> int:
    """Upper bound on the cells this assignment could use; ignores the spread rule."""
    count = 0
    for day in state.days:
        for period in state.periods:
            slot = snapshot.slot_at(day, period)
            if slot_is_open(state, class_id=work.class_info.id, faculty_id=work.faculty.id, slot=slot):
                count += 1
    return count


def prioritize_assignments(snapshot: SchedulingSnapshot, state: SchedulingState) -> list[AssignmentWork]:
    """Labs first, then the most constrained assignments; ties keep discovery order."""
    works = snapshot.assignments
    counts = [possible_slot_count(work, snapshot, state) for work in works]
    order = sorted(range(len(works)), key=lambda index: (0 if works[index].is_lab else 1, counts[index]))

    for rank, index in enumerate(order[:10], start=1):
        work = works[index]
        logger.debug(
            "PRIORITY | rank=%s | assignment=%s | possible_slots=%s | lab=%s",
            rank,
            work.describe(),
            counts[index],
            work.is_lab,
        )
    return [works[index] for index in order]
