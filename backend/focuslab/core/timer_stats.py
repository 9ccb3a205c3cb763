"""Timer Stats — pure aggregation of persisted sessions into report dicts.

Invariants:
    - Inputs are already-loaded TimerSession values (no IO, no DB)
    - Only completed sessions are counted; callers may pass any mix
    - Returns plain dicts of numbers/strings (serializable as JSON)
    - Never raises on empty input: every count defaults to 0

Design Decisions:
    - In-memory grouping over DB-specific aggregation: identical results on
      PostgreSQL and SQLite, and per-owner volumes are small
    - Daily buckets keyed by UTC date of started_at, sorted ascending
"""

from collections import defaultdict
from datetime import datetime, timezone

from focuslab.core.domain_types import TimerKind, TimerStatus
from focuslab.core.timer_session import TimerSession


def compute_summary(sessions: list[TimerSession]) -> dict:
    """Totals and averages over completed sessions."""
    done = _completed(sessions)
    total_minutes = sum(s.actual_duration_minutes for s in done)
    return {
        "total_sessions": len(done),
        "total_minutes": total_minutes,
        "average_duration_minutes": _average([s.actual_duration_minutes for s in done]),
        "average_completion": _average([s.completion_percentage for s in done]),
        "total_pomodoros": sum(1 for s in done if s.kind == TimerKind.POMODORO),
        "total_breaks": sum(1 for s in done if s.kind == TimerKind.BREAK),
    }


def compute_by_kind(sessions: list[TimerSession]) -> dict[str, dict]:
    """Per-kind count, minutes and average rating for completed sessions."""
    groups: dict[str, list[TimerSession]] = defaultdict(list)
    for s in _completed(sessions):
        groups[s.kind.value].append(s)
    return {
        kind: {
            "count": len(items),
            "total_minutes": sum(s.actual_duration_minutes for s in items),
            "average_minutes": _average([s.actual_duration_minutes for s in items]),
            "average_rating": _average([
                s.productivity_rating for s in items
                if s.productivity_rating is not None
            ], empty=None),
        }
        for kind, items in sorted(groups.items())
    }


def compute_daily(sessions: list[TimerSession]) -> list[dict]:
    """One bucket per UTC day, each broken down by kind."""
    days: dict[str, dict[str, list[TimerSession]]] = defaultdict(
        lambda: defaultdict(list),
    )
    for s in _completed(sessions):
        days[_utc_date(s.started_at)][s.kind.value].append(s)

    buckets = []
    for day in sorted(days):
        by_kind = days[day]
        kinds = [
            {
                "kind": kind,
                "count": len(items),
                "total_minutes": sum(s.actual_duration_minutes for s in items),
                "average_completion": _average(
                    [s.completion_percentage for s in items],
                ),
            }
            for kind, items in sorted(by_kind.items())
        ]
        buckets.append({
            "date": day,
            "sessions": kinds,
            "total_sessions": sum(k["count"] for k in kinds),
            "total_minutes": sum(k["total_minutes"] for k in kinds),
        })
    return buckets


def _completed(sessions: list[TimerSession]) -> list[TimerSession]:
    return [s for s in sessions if s.status == TimerStatus.COMPLETED]


def _average(values: list, empty: float | None = 0.0) -> float | None:
    if not values:
        return empty
    return round(sum(values) / len(values), 2)


def _utc_date(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).date().isoformat()
