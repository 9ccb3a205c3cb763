"""Timer reporting — history pagination, stats window and next-timer suggestion."""

from focuslab.core.domain_types import TimerKind, TimerStatus
from focuslab.core.validate_session import SessionDraft
from tests.fakes import at


async def _run(lifecycle, clock, kind="pomodoro", minutes=25, owner="user-1"):
    session = await lifecycle.start(SessionDraft(owner_id=owner, kind=kind))
    clock.advance(minutes=minutes)
    done = await lifecycle.complete(session)
    clock.advance(minutes=1)
    return done


async def test_history_paginates_newest_first(lifecycle, reporting, clock):
    first = await _run(lifecycle, clock)
    second = await _run(lifecycle, clock, kind="break", minutes=5)
    third = await _run(lifecycle, clock)

    page_one, meta = await reporting.history("user-1", page=1, limit=2)
    assert [s.id for s in page_one] == [third.id, second.id]
    assert meta == {
        "current_page": 1, "total_pages": 2, "total": 3,
        "has_next_page": True, "has_prev_page": False,
    }

    page_two, meta = await reporting.history("user-1", page=2, limit=2)
    assert [s.id for s in page_two] == [first.id]
    assert meta["has_next_page"] is False
    assert meta["has_prev_page"] is True


async def test_history_filters(lifecycle, reporting, clock):
    await _run(lifecycle, clock)
    brk = await _run(lifecycle, clock, kind="break", minutes=5)
    running = await lifecycle.start(SessionDraft(owner_id="user-1"))

    breaks, meta = await reporting.history("user-1", kind=TimerKind.BREAK)
    assert [s.id for s in breaks] == [brk.id]
    assert meta["total"] == 1

    active, _ = await reporting.history("user-1", status=TimerStatus.RUNNING)
    assert [s.id for s in active] == [running.id]

    late, _ = await reporting.history("user-1", start_date=at(20))
    assert {s.id for s in late} == {brk.id, running.id}


async def test_history_is_empty_for_unknown_owner(reporting):
    sessions, meta = await reporting.history("nobody")
    assert sessions == []
    assert meta["total"] == 0
    assert meta["total_pages"] == 0


async def test_stats_summarizes_completed_sessions(lifecycle, reporting, clock):
    await _run(lifecycle, clock, minutes=25)
    await _run(lifecycle, clock, kind="break", minutes=5)
    cancelled = await lifecycle.start(SessionDraft(owner_id="user-1"))
    clock.advance(minutes=3)
    await lifecycle.cancel(cancelled)

    stats = await reporting.stats("user-1", days=7)
    assert stats["days"] == 7
    assert stats["summary"]["total_sessions"] == 2
    assert stats["summary"]["total_minutes"] == 30
    assert stats["summary"]["total_pomodoros"] == 1
    assert stats["summary"]["total_breaks"] == 1
    assert set(stats["by_kind"]) == {"pomodoro", "break"}
    assert [d["date"] for d in stats["daily"]] == ["2026-03-02"]


async def test_stats_daily_respects_window(lifecycle, reporting, clock):
    await _run(lifecycle, clock)
    clock.advance(days=10)

    stats = await reporting.stats("user-1", days=7)
    assert stats["summary"]["total_sessions"] == 1
    assert stats["daily"] == []


async def test_next_timer_follows_pomodoro_cycle(lifecycle, reporting, clock):
    first = await reporting.next_timer("user-1")
    assert first["suggestion"]["kind"] == "pomodoro"

    await _run(lifecycle, clock)
    after_pomodoro = await reporting.next_timer("user-1")
    assert after_pomodoro["suggestion"]["kind"] == "break"
    assert after_pomodoro["suggestion"]["planned_duration_minutes"] == 5
    assert after_pomodoro["completed_pomodoros_today"] == 1

    await _run(lifecycle, clock, kind="break", minutes=5)
    await _run(lifecycle, clock, kind="focus", minutes=50)
    after_break = await reporting.next_timer("user-1")
    assert after_break["suggestion"]["kind"] == "pomodoro"
