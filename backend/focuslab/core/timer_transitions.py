"""Timer Transitions — the session lifecycle state machine.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Allowed moves: running -> paused -> running, {running, paused} -> completed |
      cancelled, running -> expired (only once non-paused time exceeds the plan)
    - Disallowed moves raise InvalidTransitionError; the input is never modified
    - A pause interval is closed exactly once: on resume, or on a terminal
      transition taken while paused
    - expire() is an idempotent no-op whenever it does not apply
    - add_interruption() only appends to the log; status and pause accounting
      are untouched

Design Decisions:
    - Exceptions over error dicts: callers (services, routes) surface the failure
      through the global FocusLabError handler, so a raised error needs no
      per-call translation
    - Half-up rounding for minutes and percentages: 12.5 -> 13, matching what
      users see on a stopwatch
"""

import math
from dataclasses import replace
from datetime import datetime

from focuslab.core.domain_types import (
    ACTIVE_STATUSES, MILLIS_PER_MINUTE, TimerOperation, TimerStatus,
)
from focuslab.core.errors import ErrorContext, InvalidTransitionError
from focuslab.core.timer_session import (
    Interruption, TimerSession, elapsed_millis, millis_between,
)


def pause(session: TimerSession, now: datetime) -> TimerSession:
    """running -> paused."""
    _require(session, TimerOperation.PAUSE, {TimerStatus.RUNNING})
    return replace(
        session,
        status=TimerStatus.PAUSED,
        paused_at=now,
        pause_count=session.pause_count + 1,
    )


def resume(session: TimerSession, now: datetime) -> TimerSession:
    """paused -> running. Folds the pause interval into total_paused_millis."""
    _require(session, TimerOperation.RESUME, {TimerStatus.PAUSED})
    return replace(
        session,
        status=TimerStatus.RUNNING,
        paused_at=None,
        total_paused_millis=session.total_paused_millis + _open_pause_millis(session, now),
    )


def complete(session: TimerSession, now: datetime) -> TimerSession:
    """{running, paused} -> completed."""
    _require(session, TimerOperation.COMPLETE, ACTIVE_STATUSES)
    return _finish(session, TimerStatus.COMPLETED, now)


def cancel(session: TimerSession, now: datetime) -> TimerSession:
    """{running, paused} -> cancelled."""
    _require(session, TimerOperation.CANCEL, ACTIVE_STATUSES)
    return _finish(session, TimerStatus.CANCELLED, now)


def add_interruption(
    session: TimerSession, reason: str, duration_millis: int, now: datetime,
) -> TimerSession:
    """Log an interruption on a running or paused session. Status is unchanged."""
    _require(session, TimerOperation.INTERRUPT, ACTIVE_STATUSES)
    entry = Interruption(
        reason=reason.strip(), duration_millis=duration_millis, recorded_at=now,
    )
    return replace(session, interruptions=session.interruptions + (entry,))


def should_expire(session: TimerSession, now: datetime) -> bool:
    """Running and non-paused time strictly exceeds the planned duration."""
    return (
        session.status == TimerStatus.RUNNING
        and elapsed_millis(session, now) > session.planned_millis
    )


def expire(session: TimerSession, now: datetime) -> TimerSession:
    """running -> expired when overdue; returns the session unchanged otherwise."""
    if not should_expire(session, now):
        return session
    return _finish(session, TimerStatus.EXPIRED, now)


def completion_percentage(actual_minutes: int, planned_minutes: int) -> int:
    """min(100, round(actual / planned * 100)), half-up."""
    if planned_minutes <= 0:
        return 0
    return min(100, _round_half_up(actual_minutes / planned_minutes * 100))


# ─── Internals ──────────────────────────────────────────────────

def _require(
    session: TimerSession, operation: TimerOperation, allowed: set | frozenset,
) -> None:
    if session.status not in allowed:
        raise InvalidTransitionError(
            operation.value, session.status.value,
            ErrorContext(session_id=str(session.id), owner_id=session.owner_id),
        )


def _open_pause_millis(session: TimerSession, now: datetime) -> int:
    # Clamped at zero so a clock step backwards cannot shrink the total
    if session.status != TimerStatus.PAUSED or session.paused_at is None:
        return 0
    return max(0, millis_between(session.paused_at, now))


def _finish(
    session: TimerSession, status: TimerStatus, now: datetime,
) -> TimerSession:
    total_paused = session.total_paused_millis + _open_pause_millis(session, now)
    worked_millis = max(
        0, millis_between(session.started_at, now) - total_paused,
    )
    actual = _round_half_up(worked_millis / MILLIS_PER_MINUTE)
    return replace(
        session,
        status=status,
        ended_at=now,
        paused_at=None,
        total_paused_millis=total_paused,
        actual_duration_minutes=actual,
        completion_percentage=completion_percentage(
            actual, session.planned_duration_minutes,
        ),
    )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
