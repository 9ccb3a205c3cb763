"""Timer session derived values — elapsed, remaining and overdue, no IO."""

from datetime import datetime, timedelta, timezone

from focuslab.core.timer_session import (
    Interruption, describe_progress, elapsed_millis, focus_millis,
    interruption_millis, is_overdue, millis_between, remaining_millis,
)
from focuslab.core.timer_transitions import cancel, complete, pause, resume
from tests.fakes import T0, at, make_session


def test_running_elapsed_excludes_paused_time():
    session = resume(pause(make_session(), at(5)), at(7))
    assert elapsed_millis(session, at(10)) == 8 * 60_000


def test_paused_elapsed_is_frozen_at_pause_moment():
    session = pause(make_session(), at(6))
    assert elapsed_millis(session, at(6)) == 6 * 60_000
    assert elapsed_millis(session, at(60)) == 6 * 60_000


def test_terminal_elapsed_uses_actual_duration():
    session = complete(make_session(), at(10, seconds=20))
    assert session.actual_duration_minutes == 10
    assert elapsed_millis(session, at(99)) == 10 * 60_000


def test_remaining_never_negative():
    session = make_session()
    assert remaining_millis(session, at(5)) == 20 * 60_000
    assert remaining_millis(session, at(90)) == 0


def test_overdue_only_when_running_and_nothing_left():
    session = make_session()
    assert not is_overdue(session, at(24))
    assert is_overdue(session, at(25))
    assert not is_overdue(pause(session, at(30)), at(40))
    assert not is_overdue(cancel(session, at(30)), at(40))


def test_describe_progress_shape():
    progress = describe_progress(make_session(), at(1))
    assert progress == {
        "elapsed_millis": 60_000,
        "remaining_millis": 24 * 60_000,
        "is_overdue": False,
        "focus_millis": 60_000,
    }


def test_elapsed_is_never_negative_when_clock_precedes_start():
    session = make_session()
    assert elapsed_millis(session, T0 - timedelta(minutes=1)) == 0


def test_millis_between_handles_days_and_microseconds():
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)
    end = start + timedelta(days=1, seconds=2, microseconds=3500)
    assert millis_between(start, end) == 86_402_003
    assert millis_between(end, start) == -86_402_004


def test_focus_time_subtracts_logged_interruptions():
    session = make_session(interruptions=(
        Interruption("phone", 90_000, at(3)),
        Interruption("door", 30_000, at(6)),
    ))
    assert interruption_millis(session) == 120_000
    assert focus_millis(session, at(10)) == 8 * 60_000


def test_focus_time_never_negative():
    session = make_session(interruptions=(Interruption("meeting", 3_600_000, at(1)),))
    assert focus_millis(session, at(5)) == 0
