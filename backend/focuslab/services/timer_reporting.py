"""Timer Reporting — history, statistics and next-timer suggestions.

Invariants:
    - Read-only: never writes through the repository
    - Reflects the current persisted state; aggregation is done by pure core functions

Design Decisions:
    - Separate from TimerLifecycle: reads have no invariants of their own
"""

import logging
import math
from datetime import datetime, timedelta

from focuslab.core.domain_types import TimerKind, TimerStatus
from focuslab.core.repository_protocols import Clock, TimerSessionRepository
from focuslab.core.suggest_next import CYCLE_KINDS, suggest_next
from focuslab.core.timer_session import TimerSession
from focuslab.core.timer_stats import compute_by_kind, compute_daily, compute_summary

logger = logging.getLogger(__name__)

RECENT_CYCLE_WINDOW = 10


class TimerReporting:
    """Read-side projections over an owner's timer sessions."""

    def __init__(self, repository: TimerSessionRepository, clock: Clock):
        self.repository = repository
        self.clock = clock

    async def history(
        self,
        owner_id: str,
        *,
        page: int = 1,
        limit: int = 20,
        kind: TimerKind | None = None,
        status: TimerStatus | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> tuple[list[TimerSession], dict]:
        """Newest-first page of sessions plus pagination metadata."""
        filters = {
            "kind": kind, "status": status,
            "since": start_date, "until": end_date,
        }
        sessions = await self.repository.list_for_owner(
            owner_id, limit=limit, offset=(page - 1) * limit, **filters,
        )
        total = await self.repository.count_for_owner(owner_id, **filters)
        total_pages = math.ceil(total / limit) if limit else 0
        return sessions, {
            "current_page": page,
            "total_pages": total_pages,
            "total": total,
            "has_next_page": page < total_pages,
            "has_prev_page": page > 1,
        }

    async def stats(self, owner_id: str, days: int = 7) -> dict:
        """Summary and per-kind totals, plus daily buckets for the last `days` days."""
        completed = await self.repository.list_for_owner(
            owner_id, status=TimerStatus.COMPLETED,
        )
        window_start = _start_of_day(self.clock.now() - timedelta(days=days))
        recent = [s for s in completed if s.started_at >= window_start]
        return {
            "summary": compute_summary(completed),
            "by_kind": compute_by_kind(completed),
            "daily": compute_daily(recent),
            "days": days,
        }

    async def next_timer(self, owner_id: str) -> dict:
        recent = await self.repository.list_for_owner(
            owner_id,
            status=TimerStatus.COMPLETED,
            kinds=CYCLE_KINDS,
            limit=RECENT_CYCLE_WINDOW,
        )
        return suggest_next(recent, self.clock.now())


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)
