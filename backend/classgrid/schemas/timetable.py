from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

# Canonical slot ordering: days first, then periods.
DAY_VALUES: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
)
PERIOD_VALUES: tuple[int, ...] = (1, 2, 3, 4, 5, 6)

BatchScopeKind = Literal["all", "term"]


class GenerateTimetableRequest(BaseModel):
    scope: BatchScopeKind = "all"
    term_id: str | None = Field(default=None, min_length=1, max_length=36)
    run_id: str | None = Field(default=None, min_length=1, max_length=36)

    @model_validator(mode="after")
    def validate_scope(self) -> "GenerateTimetableRequest":
        if self.scope == "term" and not self.term_id:
            raise ValueError("term_id is required when scope is 'term'")
        if self.scope == "all" and self.term_id:
            raise ValueError("term_id is only valid when scope is 'term'")
        return self


class TimetableEntryOut(BaseModel):
    class_id: str
    course_id: str
    faculty_id: str
    timeslot_id: str
    day: str
    period: int
    room: str

    model_config = {"from_attributes": True}


class GenerateTimetableResponse(BaseModel):
    success: bool = True
    run_id: str
    message: str
    entries: list[TimetableEntryOut] = Field(default_factory=list)
    class_count: int = 0
    total_slots: int = 0
    backtracks: int = 0
    runtime_ms: int = 0


class GenerationFailureOut(BaseModel):
    success: bool = False
    code: str
    message: str
    suggestions: list[str] = Field(default_factory=list)
    details: dict = Field(default_factory=dict)


class ProgressEvent(BaseModel):
    run_id: str
    message: str
    percent_complete: int = Field(ge=0, le=100)

    def to_payload(self) -> dict:
        return {"event": "progress", **self.model_dump()}


class GridCell(BaseModel):
    course_id: str
    course_name: str
    faculty_id: str
    faculty_name: str
    room: str | None = None
    is_lab: bool = False


class ClassGridOut(BaseModel):
    class_id: str
    section: str
    days: list[str] = Field(default_factory=lambda: list(DAY_VALUES))
    # rows are periods, columns are days
    grid: list[list[GridCell | None]]


class TermTimetableOut(BaseModel):
    term_id: str
    classes: list[ClassGridOut] = Field(default_factory=list)
