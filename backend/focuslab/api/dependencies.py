"""Request Dependencies — wiring of clock, owner identity, repository and services.

Invariants:
    - Every collaborator the services need is built here, per request
    - Tests swap the clock and database through app.dependency_overrides

Design Decisions:
    - Owner identity from the X-User-Id header: token issuance lives upstream
    - Owner ids longer than the owner_id column are a 400, checked before any
      query runs
"""

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from focuslab.core.domain_types import MAX_OWNER_ID_LENGTH
from focuslab.core.errors import MissingOwnerError, SessionValidationError
from focuslab.core.repository_protocols import Clock
from focuslab.core.validate_session import FieldError
from focuslab.infrastructure.clock import SystemClock
from focuslab.infrastructure.database import get_db
from focuslab.infrastructure.timer_repository import SqlTimerSessionRepository
from focuslab.services.timer_lifecycle import TimerLifecycle
from focuslab.services.timer_reporting import TimerReporting

_system_clock = SystemClock()


def get_clock() -> Clock:
    return _system_clock


def get_owner_id(
    user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> str:
    if not user_id or not user_id.strip():
        raise MissingOwnerError()
    owner_id = user_id.strip()
    if len(owner_id) > MAX_OWNER_ID_LENGTH:
        raise SessionValidationError([FieldError(
            "X-User-Id",
            f"Owner id cannot exceed {MAX_OWNER_ID_LENGTH} characters", "too_long",
        )])
    return owner_id


def get_timer_repository(
    db: AsyncSession = Depends(get_db),
) -> SqlTimerSessionRepository:
    return SqlTimerSessionRepository(db)


def get_timer_lifecycle(
    repository: SqlTimerSessionRepository = Depends(get_timer_repository),
    clock: Clock = Depends(get_clock),
) -> TimerLifecycle:
    return TimerLifecycle(repository, clock)


def get_timer_reporting(
    repository: SqlTimerSessionRepository = Depends(get_timer_repository),
    clock: Clock = Depends(get_clock),
) -> TimerReporting:
    return TimerReporting(repository, clock)
