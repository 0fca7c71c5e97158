from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
import logging

from classgrid.services.constraints import can_place, lab_window_is_open
from classgrid.services.data_loader import AssignmentWork, SchedulingSnapshot, SlotInfo
from classgrid.services.progress import ProgressReporter
from classgrid.services.state import EntryDraft, Placement, SchedulingState

logger = logging.getLogger(__name__)

Candidate = tuple[str, tuple[SlotInfo, ...]]


@dataclass
class SearchOutcome:
    success: bool
    entries: list[EntryDraft] = field(default_factory=list)
    backtracks: int = 0
    nodes: int = 0
    budget_exhausted: bool = False


@dataclass
class _Frame:
    index: int
    candidates: Iterator[Candidate]
    mark: int
    placed: bool = False


class BacktrackingScheduler:
    """First-feasible depth-first search over a prioritized assignment list.

    The search stack is explicit: each frame owns the candidate iterator of one
    assignment index and the journal mark to roll back to before trying its
    next candidate. Candidates are evaluated lazily against the current state,
    so a frame never sees mutations from an abandoned sibling branch.
    """

    def __init__(
        self,
        snapshot: SchedulingSnapshot,
        state: SchedulingState,
        assignments: list[AssignmentWork],
        *,
        reporter: ProgressReporter | None = None,
        node_limit: int | None = None,
    ) -> None:
        self.snapshot = snapshot
        self.state = state
        self.assignments = assignments
        self.reporter = reporter
        self.node_limit = node_limit
        self.backtracks = 0
        self.nodes = 0

    def _next_open_index(self, index: int) -> int | None:
        while index < len(self.assignments):
            if not self.state.is_satisfied(self.assignments[index]):
                return index
            index += 1
        return None

    def _lab_candidates(self, work: AssignmentWork) -> Iterator[Candidate]:
        required = work.required_slots
        periods = self.state.periods
        for day in self.state.days:
            for start in range(0, len(periods) - required + 1):
                window = [self.snapshot.slot_at(day, period) for period in periods[start : start + required]]
                if lab_window_is_open(
                    self.state,
                    class_id=work.class_info.id,
                    faculty_id=work.faculty.id,
                    window=window,
                ):
                    yield day, tuple(window)

    def _lecture_candidates(self, work: AssignmentWork) -> Iterator[Candidate]:
        for day in self.state.days:
            for period in self.state.periods:
                slot = self.snapshot.slot_at(day, period)
                if can_place(
                    self.state,
                    class_id=work.class_info.id,
                    slot=slot,
                    faculty_id=work.faculty.id,
                    course_id=work.course.id,
                    is_lab=False,
                    required_slots=work.required_slots,
                ):
                    yield day, (slot,)

    def _candidates(self, work: AssignmentWork) -> Iterator[Candidate]:
        if work.is_lab:
            return self._lab_candidates(work)
        return self._lecture_candidates(work)

    def _open_frame(self, index: int) -> _Frame:
        return _Frame(
            index=index,
            candidates=self._candidates(self.assignments[index]),
            mark=self.state.checkpoint(),
        )

    def _report_placement(self, work: AssignmentWork, placement: Placement) -> None:
        if self.reporter is None:
            return
        # One progress tick per slot, so a lab block counts once per period.
        assigned_before = self.state.slots_assigned - len(placement.slots)
        for offset in range(1, len(placement.slots) + 1):
            self.reporter.slot_placed(assigned_before + offset, f"Assigned {work.describe()}")

    def search(self) -> SearchOutcome:
        first = self._next_open_index(0)
        if first is None:
            return SearchOutcome(success=True, entries=self.state.entries())

        stack: list[_Frame] = [self._open_frame(first)]
        while stack:
            frame = stack[-1]
            if frame.placed:
                self.state.rollback(frame.mark)
                frame.placed = False
                self.backtracks += 1

            candidate = next(frame.candidates, None)
            work = self.assignments[frame.index]
            if candidate is None:
                logger.debug(
                    "NO PLACEMENT | depth=%s | index=%s | assignment=%s | assigned=%s/%s",
                    len(stack),
                    frame.index,
                    work.describe(),
                    self.state.assigned(*work.key),
                    work.required_slots,
                )
                stack.pop()
                continue

            if self.node_limit is not None and self.nodes >= self.node_limit:
                logger.warning(
                    "SEARCH BUDGET EXHAUSTED | nodes=%s | backtracks=%s | depth=%s",
                    self.nodes,
                    self.backtracks,
                    len(stack),
                )
                self.state.rollback(0)
                return SearchOutcome(
                    success=False,
                    backtracks=self.backtracks,
                    nodes=self.nodes,
                    budget_exhausted=True,
                )

            day, slots = candidate
            placement = Placement(work=work, day=day, slots=slots)
            self.state.place(placement)
            frame.placed = True
            self.nodes += 1
            self._report_placement(work, placement)

            follow = frame.index
            if work.is_lab or self.state.is_satisfied(work):
                follow = frame.index + 1
            next_index = self._next_open_index(follow)
            if next_index is None:
                logger.info(
                    "SEARCH COMPLETE | placements=%s | slots=%s | nodes=%s | backtracks=%s",
                    len(self.state.placements),
                    self.state.slots_assigned,
                    self.nodes,
                    self.backtracks,
                )
                return SearchOutcome(
                    success=True,
                    entries=self.state.entries(),
                    backtracks=self.backtracks,
                    nodes=self.nodes,
                )
            stack.append(self._open_frame(next_index))

        logger.info("SEARCH EXHAUSTED | nodes=%s | backtracks=%s", self.nodes, self.backtracks)
        return SearchOutcome(success=False, backtracks=self.backtracks, nodes=self.nodes)
