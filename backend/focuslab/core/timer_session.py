"""Timer Session — immutable value for one timed focus/break interval.

Invariants:
    - ended_at is set iff status is terminal (completed, cancelled, expired)
    - paused_at is set iff status == paused
    - total_paused_millis never decreases
    - actual_duration_minutes and completion_percentage are written once,
      on the terminal transition, and never recomputed

Design Decisions:
    - Frozen dataclass: transitions return new values via dataclasses.replace,
      so a failed transition can never leave a half-mutated session behind
    - Derived values (elapsed/remaining/overdue) are functions of (session, now),
      not stored: `now` always comes from the injected clock
    - Interruptions are logged, never folded into actual_duration_minutes;
      they only reduce the derived focus time
"""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

from focuslab.core.domain_types import (
    MILLIS_PER_MINUTE, TERMINAL_STATUSES, TimerKind, TimerStatus,
)


@dataclass(frozen=True)
class Interruption:
    """A distraction logged against a session, with how long it cost."""
    reason: str
    duration_millis: int
    recorded_at: datetime


@dataclass(frozen=True)
class TimerSession:
    """One timer session. Pure value, no IO."""

    owner_id: str
    kind: TimerKind
    planned_duration_minutes: int
    started_at: datetime
    id: UUID = field(default_factory=uuid4)
    goal_id: str | None = None
    title: str = ""
    status: TimerStatus = TimerStatus.RUNNING
    ended_at: datetime | None = None
    paused_at: datetime | None = None
    total_paused_millis: int = 0
    pause_count: int = 0
    actual_duration_minutes: int = 0
    completion_percentage: int = 0
    notes: str = ""
    tags: tuple[str, ...] = ()
    productivity_rating: int | None = None
    interruptions: tuple[Interruption, ...] = ()

    # Optimistic-concurrency counter, owned by the repository
    version: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def planned_millis(self) -> int:
        return self.planned_duration_minutes * MILLIS_PER_MINUTE


def millis_between(start: datetime, end: datetime) -> int:
    """Whole milliseconds from start to end (negative if end precedes start)."""
    delta = end - start
    return (
        delta.days * 86_400_000
        + delta.seconds * 1000
        + delta.microseconds // 1000
    )


def elapsed_millis(session: TimerSession, now: datetime) -> int:
    """Non-paused time spent on the session so far."""
    if session.is_terminal:
        return session.actual_duration_minutes * MILLIS_PER_MINUTE
    if session.status == TimerStatus.PAUSED and session.paused_at is not None:
        end = session.paused_at
    else:
        end = now
    return max(
        0, millis_between(session.started_at, end) - session.total_paused_millis,
    )


def interruption_millis(session: TimerSession) -> int:
    return sum(i.duration_millis for i in session.interruptions)


def focus_millis(session: TimerSession, now: datetime) -> int:
    """Elapsed time minus logged interruptions, never below zero."""
    return max(0, elapsed_millis(session, now) - interruption_millis(session))


def remaining_millis(session: TimerSession, now: datetime) -> int:
    return max(0, session.planned_millis - elapsed_millis(session, now))


def is_overdue(session: TimerSession, now: datetime) -> bool:
    """Running with nothing left on the clock."""
    return (
        session.status == TimerStatus.RUNNING
        and remaining_millis(session, now) == 0
    )


def describe_progress(session: TimerSession, now: datetime) -> dict:
    """Derived values for API responses and logs."""
    return {
        "elapsed_millis": elapsed_millis(session, now),
        "remaining_millis": remaining_millis(session, now),
        "is_overdue": is_overdue(session, now),
        "focus_millis": focus_millis(session, now),
    }
