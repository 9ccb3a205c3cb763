"""Timer Session Repository — SQLAlchemy implementation of TimerSessionRepository.

Invariants:
    - Every write is committed before returning (one record, one transaction)
    - save() is a compare-and-swap on `version`: zero rows updated -> ConcurrencyError,
      nothing written
    - add() maps the partial unique index violation to ActiveSessionExistsError
    - Datetimes read back are always timezone-aware UTC (SQLite drops tzinfo)

Design Decisions:
    - Conditional UPDATE over SELECT ... FOR UPDATE: one round-trip, works on SQLite
    - Returns core TimerSession values, never ORM rows: the state machine never sees
      session-bound objects
    - populate_existing on loads: a row already in the identity map is refreshed,
      so a load after another writer's commit sees the new version
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from focuslab.core.domain_types import (
    ACTIVE_STATUSES, SessionId, TimerKind, TimerStatus,
)
from focuslab.core.errors import (
    ActiveSessionExistsError, ConcurrencyError, DatabaseError, ErrorContext,
)
from focuslab.core.timer_session import Interruption, TimerSession
from focuslab.models.timer_session import TimerSessionRecord

logger = logging.getLogger(__name__)


class SqlTimerSessionRepository:
    """Timer session persistence over an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load(self, session_id: SessionId) -> TimerSession | None:
        result = await self.db.execute(
            select(TimerSessionRecord)
            .where(TimerSessionRecord.id == session_id)
            .execution_options(populate_existing=True),
        )
        row = result.scalar_one_or_none()
        return _to_domain(row) if row else None

    async def add(self, session: TimerSession) -> TimerSession:
        row = TimerSessionRecord(id=session.id, version=1, **_columns(session))
        self.db.add(row)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if await self.find_active_for_owner(session.owner_id) is None:
                logger.error(f"DB integrity error on timer insert: {e}")
                raise DatabaseError("Integrity constraint violated", "insert")
            logger.warning(
                f"Rejected second active session for owner {session.owner_id}",
                extra={"owner_id": session.owner_id},
            )
            raise ActiveSessionExistsError(session.owner_id)
        return replace(session, version=1)

    async def save(self, session: TimerSession) -> TimerSession:
        result = await self.db.execute(
            update(TimerSessionRecord)
            .where(
                TimerSessionRecord.id == session.id,
                TimerSessionRecord.version == session.version,
            )
            .values(version=session.version + 1, **_columns(session))
            .execution_options(synchronize_session=False),
        )
        if result.rowcount == 0:
            await self.db.rollback()
            raise ConcurrencyError(
                f"Timer session {session.id} was modified concurrently",
                ErrorContext(
                    session_id=str(session.id), owner_id=session.owner_id,
                    status=session.status.value,
                ),
            )
        await self.db.commit()
        return replace(session, version=session.version + 1)

    async def find_active_for_owner(self, owner_id: str) -> TimerSession | None:
        result = await self.db.execute(
            select(TimerSessionRecord)
            .where(
                TimerSessionRecord.owner_id == owner_id,
                TimerSessionRecord.status.in_([s.value for s in ACTIVE_STATUSES]),
            )
            .order_by(TimerSessionRecord.started_at.desc())
            .limit(1)
            .execution_options(populate_existing=True),
        )
        row = result.scalar_one_or_none()
        return _to_domain(row) if row else None

    async def list_running(self) -> list[TimerSession]:
        result = await self.db.execute(
            select(TimerSessionRecord)
            .where(TimerSessionRecord.status == TimerStatus.RUNNING.value)
            .execution_options(populate_existing=True),
        )
        return [_to_domain(r) for r in result.scalars().all()]

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
    ) -> list[TimerSession]:
        query = _owner_filter(
            select(TimerSessionRecord), owner_id,
            kind=kind, status=status, since=since, until=until,
        )
        if kinds:
            query = query.where(
                TimerSessionRecord.kind.in_([k.value for k in kinds]),
            )
        query = query.order_by(TimerSessionRecord.started_at.desc()).offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.db.execute(
            query.execution_options(populate_existing=True),
        )
        return [_to_domain(r) for r in result.scalars().all()]

    async def count_for_owner(
        self,
        owner_id: str,
        *,
        kind: TimerKind | None = None,
        status: TimerStatus | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> int:
        query = _owner_filter(
            select(func.count()).select_from(TimerSessionRecord), owner_id,
            kind=kind, status=status, since=since, until=until,
        )
        result = await self.db.execute(query)
        return result.scalar_one()


# ─── Mapping ────────────────────────────────────────────────────

def _owner_filter(query, owner_id, *, kind, status, since, until):
    query = query.where(TimerSessionRecord.owner_id == owner_id)
    if kind is not None:
        query = query.where(TimerSessionRecord.kind == kind.value)
    if status is not None:
        query = query.where(TimerSessionRecord.status == status.value)
    if since is not None:
        query = query.where(TimerSessionRecord.started_at >= since)
    if until is not None:
        query = query.where(TimerSessionRecord.started_at <= until)
    return query


def _columns(session: TimerSession) -> dict:
    """Mutable + creation columns (everything except id and version)."""
    return {
        "owner_id": session.owner_id,
        "goal_id": session.goal_id,
        "kind": session.kind.value,
        "title": session.title,
        "status": session.status.value,
        "planned_duration_minutes": session.planned_duration_minutes,
        "actual_duration_minutes": session.actual_duration_minutes,
        "completion_percentage": session.completion_percentage,
        "started_at": session.started_at,
        "ended_at": session.ended_at,
        "paused_at": session.paused_at,
        "total_paused_millis": session.total_paused_millis,
        "pause_count": session.pause_count,
        "notes": session.notes,
        "tags": list(session.tags),
        "productivity_rating": session.productivity_rating,
        "interruptions": [
            {
                "reason": i.reason,
                "duration_millis": i.duration_millis,
                "recorded_at": i.recorded_at.isoformat(),
            }
            for i in session.interruptions
        ],
    }


def _to_domain(row: TimerSessionRecord) -> TimerSession:
    return TimerSession(
        id=row.id,
        owner_id=row.owner_id,
        goal_id=row.goal_id,
        kind=TimerKind(row.kind),
        title=row.title,
        status=TimerStatus(row.status),
        planned_duration_minutes=row.planned_duration_minutes,
        actual_duration_minutes=row.actual_duration_minutes,
        completion_percentage=row.completion_percentage,
        started_at=_as_utc(row.started_at),
        ended_at=_as_utc(row.ended_at),
        paused_at=_as_utc(row.paused_at),
        total_paused_millis=row.total_paused_millis,
        pause_count=row.pause_count,
        notes=row.notes or "",
        tags=tuple(row.tags or ()),
        productivity_rating=row.productivity_rating,
        interruptions=tuple(
            Interruption(
                reason=item["reason"],
                duration_millis=item["duration_millis"],
                recorded_at=_as_utc(datetime.fromisoformat(item["recorded_at"])),
            )
            for item in row.interruptions or ()
        ),
        version=row.version,
    )


def _as_utc(moment: datetime | None) -> datetime | None:
    if moment is None:
        return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
