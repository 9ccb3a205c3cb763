"""Timer stats — pure aggregation over completed sessions."""

from datetime import timedelta

from focuslab.core.domain_types import TimerKind
from focuslab.core.timer_stats import compute_by_kind, compute_daily, compute_summary
from focuslab.core.timer_transitions import cancel, complete
from tests.fakes import T0, make_session


def _done(kind=TimerKind.POMODORO, minutes=25, planned=25, day=0, rating=None):
    start = T0 + timedelta(days=day)
    session = make_session(
        kind=kind, planned_duration_minutes=planned, started_at=start,
        productivity_rating=rating,
    )
    return complete(session, start + timedelta(minutes=minutes))


def test_empty_input_returns_zero_stats():
    assert compute_summary([]) == {
        "total_sessions": 0,
        "total_minutes": 0,
        "average_duration_minutes": 0.0,
        "average_completion": 0.0,
        "total_pomodoros": 0,
        "total_breaks": 0,
    }
    assert compute_by_kind([]) == {}
    assert compute_daily([]) == []


def test_summary_counts_only_completed_sessions():
    sessions = [
        _done(minutes=25),
        _done(minutes=10),
        _done(kind=TimerKind.BREAK, minutes=5, planned=5),
        cancel(make_session(), T0 + timedelta(minutes=3)),
        make_session(),
    ]
    summary = compute_summary(sessions)
    assert summary["total_sessions"] == 3
    assert summary["total_minutes"] == 40
    assert summary["average_duration_minutes"] == 13.33
    assert summary["average_completion"] == 80.0
    assert summary["total_pomodoros"] == 2
    assert summary["total_breaks"] == 1


def test_by_kind_groups_and_averages_ratings():
    stats = compute_by_kind([
        _done(minutes=20, rating=4),
        _done(minutes=30, rating=2),
        _done(kind=TimerKind.FOCUS, minutes=50, planned=50),
    ])
    assert stats["pomodoro"] == {
        "count": 2, "total_minutes": 50, "average_minutes": 25.0,
        "average_rating": 3.0,
    }
    assert stats["focus"]["average_rating"] is None
    assert list(stats) == ["focus", "pomodoro"]


def test_daily_buckets_sorted_by_date_and_split_by_kind():
    daily = compute_daily([
        _done(day=1, minutes=25),
        _done(day=0, minutes=25),
        _done(day=0, kind=TimerKind.BREAK, minutes=5, planned=5),
        _done(day=0, minutes=10),
    ])
    assert [d["date"] for d in daily] == ["2026-03-02", "2026-03-03"]
    first = daily[0]
    assert first["total_sessions"] == 3
    assert first["total_minutes"] == 40
    assert first["sessions"] == [
        {"kind": "break", "count": 1, "total_minutes": 5, "average_completion": 100.0},
        {"kind": "pomodoro", "count": 2, "total_minutes": 35, "average_completion": 70.0},
    ]
