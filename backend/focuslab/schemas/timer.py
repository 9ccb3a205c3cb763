"""Timer Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - TimerStart.planned_duration_minutes: 1-480 when sent; kind defaults to pomodoro
    - TimerComplete.productivity_rating: 1-5 when sent
    - TimerInterruptionCreate: reason 1-100 chars after strip, duration >= 1000 ms
    - TimerResponse carries derived progress computed at response time

Design Decisions:
    - field_validator for side-effect-free transforms (strip) — keeps models pure
    - TimerResponse.from_session builds the payload from a core value plus `now`,
      so routes never hand-assemble dicts
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from focuslab.core.domain_types import (
    MAX_INTERRUPTION_REASON_LENGTH, MAX_NOTES_LENGTH, MAX_PLANNED_MINUTES,
    MAX_RATING, MAX_TAG_LENGTH, MAX_TITLE_LENGTH, MIN_INTERRUPTION_MILLIS,
    MIN_PLANNED_MINUTES, MIN_RATING, TimerKind, TimerStatus,
)
from focuslab.core.timer_session import TimerSession, describe_progress
from focuslab.core.validate_session import SessionDraft


class TimerStart(BaseModel):
    """Start-session request."""
    kind: TimerKind = TimerKind.POMODORO
    planned_duration_minutes: int | None = Field(
        None, ge=MIN_PLANNED_MINUTES, le=MAX_PLANNED_MINUTES,
    )
    goal_id: str | None = Field(None, min_length=1, max_length=64)
    title: str | None = Field(None, max_length=MAX_TITLE_LENGTH)
    tags: list[str] = Field(default_factory=list, max_length=20)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v

    @field_validator("tags")
    @classmethod
    def check_tags(cls, v: list[str]) -> list[str]:
        for tag in v:
            if len(tag.strip()) > MAX_TAG_LENGTH:
                raise ValueError(f"Tag cannot exceed {MAX_TAG_LENGTH} characters")
        return v

    def to_draft(self, owner_id: str) -> SessionDraft:
        return SessionDraft(
            owner_id=owner_id,
            kind=self.kind.value,
            planned_duration_minutes=self.planned_duration_minutes,
            goal_id=self.goal_id,
            title=self.title,
            tags=list(self.tags),
        )


class TimerComplete(BaseModel):
    """Optional completion details."""
    notes: str | None = Field(None, max_length=MAX_NOTES_LENGTH)
    productivity_rating: int | None = Field(None, ge=MIN_RATING, le=MAX_RATING)


class TimerInterruptionCreate(BaseModel):
    """Log-interruption request."""
    reason: str = Field(..., min_length=1, max_length=MAX_INTERRUPTION_REASON_LENGTH)
    duration_millis: int = Field(..., ge=MIN_INTERRUPTION_MILLIS)

    @field_validator("reason")
    @classmethod
    def strip_reason(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Reason cannot be blank")
        return v


class InterruptionResponse(BaseModel):
    reason: str
    duration_millis: int
    recorded_at: datetime


class TimerResponse(BaseModel):
    """Public-facing timer session."""
    id: UUID
    owner_id: str
    goal_id: str | None
    kind: TimerKind
    title: str
    status: TimerStatus
    planned_duration_minutes: int
    actual_duration_minutes: int
    completion_percentage: int
    started_at: datetime
    ended_at: datetime | None
    paused_at: datetime | None
    total_paused_millis: int
    pause_count: int
    notes: str
    tags: list[str]
    productivity_rating: int | None
    interruptions: list[InterruptionResponse]
    elapsed_millis: int
    remaining_millis: int
    is_overdue: bool
    focus_millis: int

    @classmethod
    def from_session(cls, session: TimerSession, now: datetime) -> "TimerResponse":
        return cls(
            id=session.id,
            owner_id=session.owner_id,
            goal_id=session.goal_id,
            kind=session.kind,
            title=session.title,
            status=session.status,
            planned_duration_minutes=session.planned_duration_minutes,
            actual_duration_minutes=session.actual_duration_minutes,
            completion_percentage=session.completion_percentage,
            started_at=session.started_at,
            ended_at=session.ended_at,
            paused_at=session.paused_at,
            total_paused_millis=session.total_paused_millis,
            pause_count=session.pause_count,
            notes=session.notes,
            tags=list(session.tags),
            productivity_rating=session.productivity_rating,
            interruptions=[
                InterruptionResponse(
                    reason=i.reason,
                    duration_millis=i.duration_millis,
                    recorded_at=i.recorded_at,
                )
                for i in session.interruptions
            ],
            **describe_progress(session, now),
        )


class ActiveTimerResponse(BaseModel):
    session: TimerResponse | None


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total: int
    has_next_page: bool
    has_prev_page: bool


class TimerHistoryResponse(BaseModel):
    sessions: list[TimerResponse]
    pagination: Pagination


class SweepResponse(BaseModel):
    expired_count: int
    expired_ids: list[UUID]
