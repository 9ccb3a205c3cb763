"""Test doubles — deterministic clock and session builders."""

from datetime import datetime, timedelta, timezone

from focuslab.core.domain_types import TimerKind
from focuslab.core.timer_session import TimerSession

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime = T0):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


def at(minutes: float = 0, seconds: float = 0) -> datetime:
    """T0 plus an offset; keeps scenario timelines readable."""
    return T0 + timedelta(minutes=minutes, seconds=seconds)


def make_session(**overrides) -> TimerSession:
    fields = {
        "owner_id": "user-1",
        "kind": TimerKind.POMODORO,
        "planned_duration_minutes": 25,
        "started_at": T0,
        "title": "Focus Session",
    }
    fields.update(overrides)
    return TimerSession(**fields)
