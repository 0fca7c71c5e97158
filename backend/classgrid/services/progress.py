from __future__ import annotations

from collections.abc import Callable
import logging
import random

from classgrid.schemas.timetable import ProgressEvent
from classgrid.services.progress_hub import publish_progress

logger = logging.getLogger(__name__)

ProgressSink = Callable[[ProgressEvent], None]


def percent_complete(slots_assigned: int, total_slots: int) -> int:
    if total_slots <= 0:
        return 100
    value = int(100 * slots_assigned / total_slots + 0.5)
    return max(0, min(100, value))


class ProgressReporter:
    """Throttled progress events for one run.

    Emits a start event, one event per ``every`` placed slots, and a single
    terminal event. ``jitter`` adds an optional random extra emission on other
    placements; it does not influence the search.
    """

    def __init__(
        self,
        run_id: str,
        *,
        total_slots: int = 0,
        every: int = 3,
        jitter: float = 0.0,
        seed: int | None = None,
        sink: ProgressSink | None = None,
    ) -> None:
        self.run_id = run_id
        self.total_slots = total_slots
        self.every = max(1, every)
        self.jitter = jitter
        self._random = random.Random(seed)
        self._sink = sink or publish_progress
        self._placements = 0
        self._started = False
        self._finished = False
        self.events_emitted = 0

    def _emit(self, message: str, percent: int) -> None:
        logger.debug("PROGRESS | run_id=%s | percent=%s | %s", self.run_id, percent, message)
        self._sink(ProgressEvent(run_id=self.run_id, message=message, percent_complete=percent))
        self.events_emitted += 1

    def started(self, total_slots: int | None = None) -> None:
        if total_slots is not None:
            self.total_slots = total_slots
        self._started = True
        self._emit("Started generating timetable", 0)

    def slot_placed(self, slots_assigned: int, message: str) -> None:
        self._placements += 1
        if self._placements % self.every == 0:
            self._emit(message, percent_complete(slots_assigned, self.total_slots))
        elif self.jitter and self._random.random() < self.jitter:
            self._emit(message, percent_complete(slots_assigned, self.total_slots))

    def succeeded(self) -> None:
        if self._finished:
            return
        self._finished = True
        self._emit("Timetable generated successfully", 100)

    def failed(self) -> None:
        # Runs rejected before the search started never announced themselves.
        if not self._started or self._finished:
            return
        self._finished = True
        self._emit("Timetable generation failed", 0)
