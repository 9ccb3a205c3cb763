"""Timer Sessions — start, read and transition one owner's timer sessions.

Invariants:
    - Owner identity comes from get_owner_id (X-User-Id) on every route
    - Domain errors (invalid transition, not found, conflicts) propagate to the
      global FocusLabError handler; routes never build error bodies themselves
    - Responses carry elapsed/remaining/overdue computed with the same clock
      the transition used

Design Decisions:
    - Id-addressed transitions (POST /{id}/pause ...) over "the active timer":
      a stale client cannot pause a session it is not looking at
    - Static paths (/active, /history, ...) declared before /{session_id}
"""

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, status

from focuslab.config import Settings, get_settings
from focuslab.core.domain_types import TimerKind, TimerStatus
from focuslab.core.repository_protocols import Clock
from focuslab.api.dependencies import (
    get_clock, get_owner_id, get_timer_lifecycle, get_timer_reporting,
)
from focuslab.schemas.timer import (
    ActiveTimerResponse, Pagination, SweepResponse, TimerComplete,
    TimerHistoryResponse, TimerInterruptionCreate, TimerResponse, TimerStart,
)
from focuslab.services.timer_lifecycle import TimerLifecycle
from focuslab.services.timer_reporting import TimerReporting

router = APIRouter(prefix="/api/v1/timers", tags=["timers"])


@router.post(
    "", response_model=TimerResponse, status_code=status.HTTP_201_CREATED,
)
async def start_timer(
    body: TimerStart,
    owner_id: str = Depends(get_owner_id),
    lifecycle: TimerLifecycle = Depends(get_timer_lifecycle),
    clock: Clock = Depends(get_clock),
):
    """Start a new timer session. Fails with 409 if one is already active."""
    session = await lifecycle.start(body.to_draft(owner_id))
    return TimerResponse.from_session(session, clock.now())


@router.get("/active", response_model=ActiveTimerResponse)
async def get_active_timer(
    owner_id: str = Depends(get_owner_id),
    lifecycle: TimerLifecycle = Depends(get_timer_lifecycle),
    clock: Clock = Depends(get_clock),
):
    """The owner's running or paused session, or null."""
    session = await lifecycle.get_active(owner_id)
    return ActiveTimerResponse(
        session=TimerResponse.from_session(session, clock.now()) if session else None,
    )


@router.get("/history", response_model=TimerHistoryResponse)
async def get_timer_history(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    kind: TimerKind | None = Query(None),
    status_filter: TimerStatus | None = Query(None, alias="status"),
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    owner_id: str = Depends(get_owner_id),
    reporting: TimerReporting = Depends(get_timer_reporting),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_settings),
):
    """Paginated session history, newest first."""
    sessions, pagination = await reporting.history(
        owner_id,
        page=page,
        limit=min(limit, settings.history_page_size_max),
        kind=kind,
        status=status_filter,
        start_date=_as_utc(start_date),
        end_date=_as_utc(end_date),
    )
    now = clock.now()
    return TimerHistoryResponse(
        sessions=[TimerResponse.from_session(s, now) for s in sessions],
        pagination=Pagination(**pagination),
    )


@router.get("/stats")
async def get_timer_stats(
    days: int = Query(7, ge=1),
    owner_id: str = Depends(get_owner_id),
    reporting: TimerReporting = Depends(get_timer_reporting),
    settings: Settings = Depends(get_settings),
):
    """Completed-session summary, per-kind totals and daily buckets."""
    return await reporting.stats(owner_id, days=min(days, settings.stats_days_max))


@router.get("/next")
async def get_next_timer(
    owner_id: str = Depends(get_owner_id),
    reporting: TimerReporting = Depends(get_timer_reporting),
):
    """Suggest the next timer in the pomodoro cycle."""
    return await reporting.next_timer(owner_id)


@router.post("/expire-sweep", response_model=SweepResponse)
async def expire_sweep(
    lifecycle: TimerLifecycle = Depends(get_timer_lifecycle),
):
    """Expire every overdue running session. Meant for a periodic external caller."""
    expired = await lifecycle.sweep_expired()
    return SweepResponse(
        expired_count=len(expired), expired_ids=[s.id for s in expired],
    )


@router.get("/{session_id}", response_model=TimerResponse)
async def get_timer(
    session_id: UUID,
    owner_id: str = Depends(get_owner_id),
    lifecycle: TimerLifecycle = Depends(get_timer_lifecycle),
    clock: Clock = Depends(get_clock),
):
    """One session; expired first if it ran past its planned duration."""
    session = await lifecycle.get(session_id, owner_id)
    return TimerResponse.from_session(session, clock.now())


@router.post("/{session_id}/pause", response_model=TimerResponse)
async def pause_timer(
    session_id: UUID,
    owner_id: str = Depends(get_owner_id),
    lifecycle: TimerLifecycle = Depends(get_timer_lifecycle),
    clock: Clock = Depends(get_clock),
):
    session = await lifecycle.load_owned(session_id, owner_id)
    session = await lifecycle.pause(session)
    return TimerResponse.from_session(session, clock.now())


@router.post("/{session_id}/resume", response_model=TimerResponse)
async def resume_timer(
    session_id: UUID,
    owner_id: str = Depends(get_owner_id),
    lifecycle: TimerLifecycle = Depends(get_timer_lifecycle),
    clock: Clock = Depends(get_clock),
):
    session = await lifecycle.load_owned(session_id, owner_id)
    session = await lifecycle.resume(session)
    return TimerResponse.from_session(session, clock.now())


@router.post("/{session_id}/complete", response_model=TimerResponse)
async def complete_timer(
    session_id: UUID,
    body: TimerComplete | None = Body(None),
    owner_id: str = Depends(get_owner_id),
    lifecycle: TimerLifecycle = Depends(get_timer_lifecycle),
    clock: Clock = Depends(get_clock),
):
    """Complete the session, optionally recording notes and a 1-5 rating."""
    details = body or TimerComplete()
    session = await lifecycle.load_owned(session_id, owner_id)
    session = await lifecycle.complete(
        session, notes=details.notes, productivity_rating=details.productivity_rating,
    )
    return TimerResponse.from_session(session, clock.now())


@router.post("/{session_id}/interruptions", response_model=TimerResponse)
async def add_timer_interruption(
    session_id: UUID,
    body: TimerInterruptionCreate,
    owner_id: str = Depends(get_owner_id),
    lifecycle: TimerLifecycle = Depends(get_timer_lifecycle),
    clock: Clock = Depends(get_clock),
):
    """Log an interruption against a running or paused session."""
    session = await lifecycle.load_owned(session_id, owner_id)
    session = await lifecycle.add_interruption(
        session, reason=body.reason, duration_millis=body.duration_millis,
    )
    return TimerResponse.from_session(session, clock.now())


@router.post("/{session_id}/cancel", response_model=TimerResponse)
async def cancel_timer(
    session_id: UUID,
    owner_id: str = Depends(get_owner_id),
    lifecycle: TimerLifecycle = Depends(get_timer_lifecycle),
    clock: Clock = Depends(get_clock),
):
    session = await lifecycle.load_owned(session_id, owner_id)
    session = await lifecycle.cancel(session)
    return TimerResponse.from_session(session, clock.now())


def _as_utc(moment: datetime | None) -> datetime | None:
    if moment is None:
        return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
