"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass plain fakes
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions never are — the shell orchestrates the async calls
      around the pure transitions
    - Clock is a protocol too: the state machine never reads wall-clock time itself
"""

from datetime import datetime
from typing import Protocol

from focuslab.core.domain_types import SessionId, TimerKind, TimerStatus
from focuslab.core.timer_session import TimerSession


class Clock(Protocol):
    """Wall-clock source. now() returns a timezone-aware UTC datetime."""
    def now(self) -> datetime: ...


class TimerSessionRepository(Protocol):
    """Contract for timer session persistence — implemented by shell.

    save() is an atomic compare-and-swap on `version`: it raises
    ConcurrencyError when the stored version moved on since `session` was loaded.
    """
    async def load(self, session_id: SessionId) -> TimerSession | None: ...
    async def add(self, session: TimerSession) -> TimerSession: ...
    async def save(self, session: TimerSession) -> TimerSession: ...
    async def find_active_for_owner(self, owner_id: str) -> TimerSession | None: ...
    async def list_running(self) -> list[TimerSession]: ...
    async def list_for_owner(
        self,
        owner_id: str,
        *,
        kind: TimerKind | None = None,
        status: TimerStatus | None = None,
        kinds: tuple[TimerKind, ...] | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[TimerSession]: ...
    async def count_for_owner(
        self,
        owner_id: str,
        *,
        kind: TimerKind | None = None,
        status: TimerStatus | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> int: ...
