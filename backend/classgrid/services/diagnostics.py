from __future__ import annotations

import logging

from classgrid.services.availability import AvailabilityManager
from classgrid.services.data_loader import SchedulingSnapshot

logger = logging.getLogger(__name__)

FALLBACK_SUGGESTION = (
    "No single class or faculty is over capacity; review faculty availability overlaps "
    "and lab blocks that compete for the same periods"
)


def overloaded_class_suggestions(snapshot: SchedulingSnapshot, *, credit_cap: int) -> list[str]:
    suggestions: list[str] = []
    for class_id, credits in snapshot.credits_by_class().items():
        if credits > credit_cap:
            section = snapshot.classes[class_id].section if class_id in snapshot.classes else class_id
            suggestions.append(
                f"Reduce courses for class {section} (current credits: {credits}, limit: {credit_cap})"
            )
    return suggestions


def faculty_shortfall_suggestions(snapshot: SchedulingSnapshot, availability: AvailabilityManager) -> list[str]:
    names = {work.faculty.id: work.faculty.name for work in snapshot.assignments}
    suggestions: list[str] = []
    for faculty_id, needed in snapshot.slots_needed_by_faculty().items():
        available = availability.available_count(faculty_id)
        if available < needed:
            suggestions.append(
                f"Increase availability for faculty {names.get(faculty_id, faculty_id)} "
                f"(needs {needed}, available {available})"
            )
    return suggestions


def generate_suggestions(
    snapshot: SchedulingSnapshot,
    availability: AvailabilityManager,
    *,
    credit_cap: int = 36,
) -> list[str]:
    """Advisory hints for a failed search.

    These are isolated per-class and per-faculty capacity checks; infeasibility
    caused by interactions between assignments is not detected.
    """
    suggestions = overloaded_class_suggestions(snapshot, credit_cap=credit_cap)
    suggestions.extend(faculty_shortfall_suggestions(snapshot, availability))
    if not suggestions:
        suggestions.append(FALLBACK_SUGGESTION)
    logger.info("DIAGNOSTICS | suggestions=%s", len(suggestions))
    return suggestions
