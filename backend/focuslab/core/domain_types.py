"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - SessionId wraps UUID; OwnerId and GoalId wrap opaque strings
    - Planned duration is bounded 1–480 minutes
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and to the DB `status`/`kind` columns as-is
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

SessionId = NewType("SessionId", UUID)
OwnerId = NewType("OwnerId", str)
GoalId = NewType("GoalId", str)


# ─── Bounds ──────────────────────────────────────────────────────

MIN_PLANNED_MINUTES = 1
MAX_PLANNED_MINUTES = 480
MILLIS_PER_MINUTE = 60_000

MAX_TITLE_LENGTH = 100
MAX_NOTES_LENGTH = 500
MAX_TAG_LENGTH = 30
MIN_RATING = 1
MAX_RATING = 5

MAX_OWNER_ID_LENGTH = 64
MAX_INTERRUPTION_REASON_LENGTH = 100
MIN_INTERRUPTION_MILLIS = 1000


# ─── Enums ───────────────────────────────────────────────────────

class TimerKind(str, Enum):
    """What the session is for. Fixed at creation."""
    POMODORO = "pomodoro"
    FOCUS = "focus"
    BREAK = "break"
    CUSTOM = "custom"


class TimerStatus(str, Enum):
    """Timer session lifecycle states, mapped to DB `status` column."""
    RUNNING = "running"
    PAUSED = "paused"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


ACTIVE_STATUSES: frozenset[TimerStatus] = frozenset(
    {TimerStatus.RUNNING, TimerStatus.PAUSED},
)
TERMINAL_STATUSES: frozenset[TimerStatus] = frozenset(
    {TimerStatus.COMPLETED, TimerStatus.CANCELLED, TimerStatus.EXPIRED},
)


class TimerOperation(str, Enum):
    """Named transitions, used in errors and structured logs."""
    PAUSE = "pause"
    RESUME = "resume"
    COMPLETE = "complete"
    CANCEL = "cancel"
    EXPIRE = "expire"
    INTERRUPT = "interrupt"


# Minutes used when the client does not send a planned duration
DEFAULT_PLANNED_MINUTES: dict[TimerKind, int] = {
    TimerKind.POMODORO: 25,
    TimerKind.FOCUS: 50,
    TimerKind.BREAK: 5,
    TimerKind.CUSTOM: 25,
}

DEFAULT_TITLES: dict[TimerKind, str] = {
    TimerKind.POMODORO: "Focus Session",
    TimerKind.FOCUS: "Deep Focus",
    TimerKind.BREAK: "Break",
    TimerKind.CUSTOM: "Timer Session",
}

# Pomodoro cycle
LONG_BREAK_MINUTES = 15
POMODOROS_BEFORE_LONG_BREAK = 4
