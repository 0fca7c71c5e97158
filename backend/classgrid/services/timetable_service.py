from __future__ import annotations

import logging
from time import perf_counter
import uuid

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from classgrid.core.config import Settings, get_settings
from classgrid.core.exceptions import (
    AppError,
    CapacityFailure,
    PersistenceFailure,
    SchedulingInfeasible,
    ValidationFailure,
)
from classgrid.schemas.timetable import GenerateTimetableRequest, GenerateTimetableResponse, TimetableEntryOut
from classgrid.services.availability import AvailabilityManager, reset_availability
from classgrid.services.data_loader import SchedulingSnapshot, load_snapshot
from classgrid.services.diagnostics import generate_suggestions
from classgrid.services.persistence import commit_schedule
from classgrid.services.prioritizer import prioritize_assignments
from classgrid.services.progress import ProgressReporter, ProgressSink
from classgrid.services.scheduler import BacktrackingScheduler
from classgrid.services.state import SchedulingState

logger = logging.getLogger(__name__)


def coerce_request(payload: GenerateTimetableRequest | dict | None) -> GenerateTimetableRequest:
    if isinstance(payload, GenerateTimetableRequest):
        return payload
    try:
        return GenerateTimetableRequest.model_validate(payload or {})
    except ValidationError as exc:
        errors = [error.get("msg", "invalid value") for error in exc.errors()]
        raise ValidationFailure("Invalid batch scope", details={"errors": errors}) from exc


def ensure_class_capacity(snapshot: SchedulingSnapshot, *, credit_cap: int) -> None:
    for class_id, credits in snapshot.credits_by_class().items():
        if credits > credit_cap:
            section = snapshot.classes[class_id].section
            raise CapacityFailure(
                f"Class {section} exceeds {credit_cap} credits (total: {credits})",
                details={"class_id": class_id, "credits": credits, "limit": credit_cap},
            )


class TimetableGenerator:
    """Runs one all-or-nothing timetable generation for a batch of classes.

    Everything from the availability reset to the final write happens on the
    given session inside one transaction; any failure rolls the session back.
    """

    def __init__(
        self,
        db: Session,
        *,
        settings: Settings | None = None,
        progress_sink: ProgressSink | None = None,
    ) -> None:
        self.db = db
        self.settings = settings or get_settings()
        self.progress_sink = progress_sink

    def invoke(self, payload: GenerateTimetableRequest | dict | None) -> GenerateTimetableResponse:
        request = coerce_request(payload)
        run_id = request.run_id or str(uuid.uuid4())
        reporter = ProgressReporter(
            run_id,
            every=self.settings.progress_every,
            jitter=self.settings.progress_jitter,
            seed=self.settings.progress_seed,
            sink=self.progress_sink,
        )
        started = perf_counter()
        logger.info(
            "TIMETABLE GENERATION START | run_id=%s | scope=%s | term_id=%s",
            run_id,
            request.scope,
            request.term_id,
        )
        try:
            response = self._run(request, run_id=run_id, reporter=reporter)
        except AppError as exc:
            self.db.rollback()
            reporter.failed()
            logger.warning(
                "TIMETABLE GENERATION FAILED | run_id=%s | code=%s | reason=%s | wall_ms=%s",
                run_id,
                exc.code,
                exc.message,
                int((perf_counter() - started) * 1000),
            )
            raise
        except Exception as exc:
            self.db.rollback()
            reporter.failed()
            logger.exception(
                "TIMETABLE GENERATION ERROR | run_id=%s | wall_ms=%s",
                run_id,
                int((perf_counter() - started) * 1000),
            )
            raise AppError("Timetable generation failed", details={"run_id": run_id}) from exc

        response.runtime_ms = int((perf_counter() - started) * 1000)
        logger.info(
            "TIMETABLE GENERATION COMPLETE | run_id=%s | classes=%s | entries=%s | backtracks=%s | wall_ms=%s",
            run_id,
            response.class_count,
            len(response.entries),
            response.backtracks,
            response.runtime_ms,
        )
        return response

    def _run(
        self,
        request: GenerateTimetableRequest,
        *,
        run_id: str,
        reporter: ProgressReporter,
    ) -> GenerateTimetableResponse:
        snapshot = load_snapshot(self.db, request, max_course_credits=self.settings.max_course_credits)
        ensure_class_capacity(snapshot, credit_cap=self.settings.class_credit_cap)

        class_ids = snapshot.class_ids
        faculty_ids = snapshot.faculty_ids
        reset_availability(self.db, faculty_ids)
        availability = AvailabilityManager.load(self.db, faculty_ids=faculty_ids, batch_class_ids=class_ids)

        state = SchedulingState(class_ids, availability)
        ordered = prioritize_assignments(snapshot, state)

        total_slots = snapshot.total_required_slots
        reporter.started(total_slots)
        scheduler = BacktrackingScheduler(
            snapshot,
            state,
            ordered,
            reporter=reporter,
            node_limit=self.settings.search_node_limit,
        )
        outcome = scheduler.search()

        if not outcome.success:
            suggestions = generate_suggestions(snapshot, availability, credit_cap=self.settings.class_credit_cap)
            message = "Failed to generate timetable due to conflicts"
            if outcome.budget_exhausted:
                message = "Failed to generate timetable: search budget exhausted"
            raise SchedulingInfeasible(
                message,
                suggestions=suggestions,
                details={"run_id": run_id, "backtracks": outcome.backtracks, "nodes": outcome.nodes},
            )

        commit_schedule(self.db, run_id=run_id, class_ids=class_ids, entries=outcome.entries)
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            raise PersistenceFailure("Failed to commit generated timetable", details={"run_id": run_id}) from exc
        reporter.succeeded()

        return GenerateTimetableResponse(
            run_id=run_id,
            message="Timetable generated successfully",
            entries=[
                TimetableEntryOut(
                    class_id=entry.class_id,
                    course_id=entry.course_id,
                    faculty_id=entry.faculty_id,
                    timeslot_id=entry.timeslot_id,
                    day=entry.day,
                    period=entry.period,
                    room=entry.room,
                )
                for entry in outcome.entries
            ],
            class_count=len(class_ids),
            total_slots=total_slots,
            backtracks=outcome.backtracks,
        )
