"""Next Timer Suggestion — pomodoro cycle rule over recent completed sessions.

Invariants:
    - Pure: input is the recent completed sessions, newest first
    - Only pomodoro and break sessions take part in the cycle
    - After a pomodoro: a break (long every Nth pomodoro); otherwise: a pomodoro
"""

from datetime import datetime, timezone

from focuslab.core.domain_types import (
    DEFAULT_PLANNED_MINUTES, LONG_BREAK_MINUTES, POMODOROS_BEFORE_LONG_BREAK,
    TimerKind,
)
from focuslab.core.timer_session import TimerSession

CYCLE_KINDS = (TimerKind.POMODORO, TimerKind.BREAK)


def suggest_next(recent: list[TimerSession], now: datetime) -> dict:
    """Suggest the next timer kind and duration."""
    cycle = [s for s in recent if s.kind in CYCLE_KINDS]
    pomodoros = sum(1 for s in cycle if s.kind == TimerKind.POMODORO)

    if not cycle:
        suggestion = _suggestion(
            TimerKind.POMODORO, DEFAULT_PLANNED_MINUTES[TimerKind.POMODORO],
            "Start your productivity session",
        )
    elif cycle[0].kind == TimerKind.POMODORO:
        if pomodoros % POMODOROS_BEFORE_LONG_BREAK == 0:
            suggestion = _suggestion(
                TimerKind.BREAK, LONG_BREAK_MINUTES,
                f"Time for a long break! You've completed {pomodoros} pomodoros.",
            )
        else:
            suggestion = _suggestion(
                TimerKind.BREAK, DEFAULT_PLANNED_MINUTES[TimerKind.BREAK],
                "Take a short break before the next focus session",
            )
    else:
        suggestion = _suggestion(
            TimerKind.POMODORO, DEFAULT_PLANNED_MINUTES[TimerKind.POMODORO],
            "Ready for another focus session!",
        )

    today = now.astimezone(timezone.utc).date()
    return {
        "suggestion": suggestion,
        "completed_pomodoros_today": sum(
            1 for s in cycle
            if s.kind == TimerKind.POMODORO
            and _as_utc(s.started_at).date() == today
        ),
        "pomodoros_before_long_break": POMODOROS_BEFORE_LONG_BREAK,
    }


def _suggestion(kind: TimerKind, minutes: int, reason: str) -> dict:
    return {"kind": kind.value, "planned_duration_minutes": minutes, "reason": reason}


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
