"""Timer transitions — pure tests for the session lifecycle state machine.

Tests cover:
    - Allowed and disallowed moves for pause/resume/complete/cancel/expire
    - Pause accounting (total_paused_millis, pause_count, open interval folding)
    - Actual duration and completion percentage on terminal transitions
    - The endedAt/pausedAt invariants after every step
"""

import pytest

from focuslab.core.domain_types import TERMINAL_STATUSES, TimerStatus
from focuslab.core.errors import InvalidTransitionError
from focuslab.core.timer_transitions import (
    add_interruption, cancel, complete, completion_percentage, expire, pause,
    resume, should_expire,
)
from tests.fakes import at, make_session


def _assert_invariants(session):
    assert (session.ended_at is not None) == (session.status in TERMINAL_STATUSES)
    assert (session.paused_at is not None) == (session.status == TimerStatus.PAUSED)


# --- pause / resume -----------------------------------------------------------

def test_pause_running_session():
    session = pause(make_session(), at(5))
    assert session.status == TimerStatus.PAUSED
    assert session.paused_at == at(5)
    assert session.pause_count == 1
    _assert_invariants(session)


def test_pause_twice_fails_and_leaves_first_result_unchanged():
    paused = pause(make_session(), at(5))
    snapshot = paused
    with pytest.raises(InvalidTransitionError) as exc:
        pause(paused, at(6))
    assert exc.value.operation == "pause"
    assert exc.value.status == "paused"
    assert paused == snapshot
    assert paused.paused_at == at(5)
    assert paused.pause_count == 1


def test_resume_folds_pause_interval():
    session = resume(pause(make_session(), at(5)), at(7))
    assert session.status == TimerStatus.RUNNING
    assert session.paused_at is None
    assert session.total_paused_millis == 2 * 60_000
    _assert_invariants(session)


def test_pause_then_immediate_resume_adds_the_gap():
    session = resume(pause(make_session(), at(3)), at(3, seconds=1.5))
    assert session.status == TimerStatus.RUNNING
    assert session.total_paused_millis == 1500


def test_resume_running_session_fails():
    with pytest.raises(InvalidTransitionError) as exc:
        resume(make_session(), at(1))
    assert exc.value.code == "INVALID_TRANSITION"
    assert exc.value.http_status == 400


def test_multiple_pauses_accumulate():
    session = make_session()
    session = resume(pause(session, at(2)), at(3))
    session = resume(pause(session, at(10)), at(14))
    assert session.pause_count == 2
    assert session.total_paused_millis == 5 * 60_000


def test_resume_with_clock_behind_pause_never_decreases_total():
    session = pause(make_session(total_paused_millis=1000), at(5))
    session = resume(session, at(4))
    assert session.total_paused_millis == 1000


# --- complete -----------------------------------------------------------------

def test_complete_after_exact_planned_time_is_100_percent():
    session = complete(make_session(), at(25))
    assert session.status == TimerStatus.COMPLETED
    assert session.ended_at == at(25)
    assert session.actual_duration_minutes == 25
    assert session.completion_percentage == 100
    _assert_invariants(session)


def test_complete_after_10_of_25_minutes_is_40_percent():
    session = complete(make_session(), at(10))
    assert session.actual_duration_minutes == 10
    assert session.completion_percentage == 40


def test_complete_from_paused_closes_pause_interval():
    session = complete(pause(make_session(), at(10)), at(15))
    assert session.total_paused_millis == 5 * 60_000
    assert session.actual_duration_minutes == 10
    assert session.paused_at is None
    _assert_invariants(session)


def test_complete_twice_fails_as_already_finished():
    done = complete(make_session(), at(25))
    with pytest.raises(InvalidTransitionError) as exc:
        complete(done, at(26))
    assert "already finished" in exc.value.message
    assert done.ended_at == at(25)


def test_complete_cancelled_session_fails():
    with pytest.raises(InvalidTransitionError):
        complete(cancel(make_session(), at(3)), at(4))


def test_complete_expired_session_fails():
    expired = expire(make_session(), at(30))
    assert expired.status == TimerStatus.EXPIRED
    with pytest.raises(InvalidTransitionError):
        complete(expired, at(31))


def test_scenario_pause_resume_then_complete_late():
    session = make_session()
    session = pause(session, at(5))
    session = resume(session, at(7))
    session = complete(session, at(30))
    assert session.actual_duration_minutes == 28
    assert session.completion_percentage == 100
    assert session.total_paused_millis == 2 * 60_000


def test_actual_duration_rounds_half_up():
    session = complete(make_session(), at(12, seconds=30))
    assert session.actual_duration_minutes == 13


# --- cancel -------------------------------------------------------------------

def test_cancel_running_session():
    session = cancel(make_session(), at(5))
    assert session.status == TimerStatus.CANCELLED
    assert session.actual_duration_minutes == 5
    assert session.completion_percentage == 20
    _assert_invariants(session)


def test_cancel_from_paused_folds_open_pause_first():
    session = pause(make_session(), at(8))
    session = cancel(session, at(20))
    assert session.total_paused_millis == 12 * 60_000
    assert session.actual_duration_minutes == 8
    assert session.completion_percentage == 32


def test_cancel_percentage_capped_at_100():
    session = cancel(make_session(planned_duration_minutes=10), at(40))
    assert session.actual_duration_minutes == 40
    assert session.completion_percentage == 100


def test_cancel_completed_session_fails():
    with pytest.raises(InvalidTransitionError) as exc:
        cancel(complete(make_session(), at(25)), at(26))
    assert exc.value.status == "completed"


# --- expire -------------------------------------------------------------------

def test_expire_is_noop_before_planned_time():
    session = make_session()
    assert expire(session, at(25)) is session


def test_expire_running_session_past_planned_time():
    session = expire(make_session(), at(26))
    assert session.status == TimerStatus.EXPIRED
    assert session.ended_at == at(26)
    assert session.actual_duration_minutes == 26
    assert session.completion_percentage == 100
    _assert_invariants(session)


def test_expire_accounts_for_paused_time():
    session = resume(pause(make_session(), at(5)), at(15))
    assert not should_expire(session, at(30))
    assert should_expire(session, at(36))


def test_expire_is_noop_on_completed_session():
    done = complete(make_session(), at(10))
    assert expire(done, at(500)) is done


def test_expire_is_noop_on_paused_session():
    paused = pause(make_session(), at(5))
    assert expire(paused, at(500)) is paused


# --- monotonic pause accounting -----------------------------------------------

def test_total_paused_never_decreases_across_a_sequence():
    session = make_session()
    seen = [session.total_paused_millis]
    steps = [
        (pause, 1), (resume, 2), (pause, 4), (resume, 9), (pause, 12), (complete, 13),
    ]
    for op, minute in steps:
        session = op(session, at(minute))
        seen.append(session.total_paused_millis)
        _assert_invariants(session)
    assert seen == sorted(seen)


def test_completion_percentage_formula():
    assert completion_percentage(10, 25) == 40
    assert completion_percentage(25, 25) == 100
    assert completion_percentage(60, 25) == 100
    assert completion_percentage(0, 25) == 0
    assert completion_percentage(1, 3) == 33
    assert completion_percentage(1, 8) == 13


# --- interruptions ------------------------------------------------------------

def test_add_interruption_appends_without_changing_status():
    session = add_interruption(make_session(), "  phone call ", 90_000, at(4))
    session = add_interruption(session, "door", 5_000, at(6))
    assert session.status == TimerStatus.RUNNING
    assert [i.reason for i in session.interruptions] == ["phone call", "door"]
    assert session.interruptions[0].duration_millis == 90_000
    assert session.interruptions[0].recorded_at == at(4)
    assert session.total_paused_millis == 0


def test_add_interruption_allowed_while_paused():
    paused = pause(make_session(), at(5))
    session = add_interruption(paused, "email", 2_000, at(6))
    assert session.status == TimerStatus.PAUSED
    assert session.paused_at == at(5)
    assert len(session.interruptions) == 1


def test_add_interruption_on_finished_session_fails():
    done = complete(make_session(), at(25))
    with pytest.raises(InvalidTransitionError) as exc:
        add_interruption(done, "late", 1_000, at(26))
    assert exc.value.operation == "interrupt"
    assert done.interruptions == ()


def test_interruptions_do_not_change_actual_duration():
    session = add_interruption(make_session(), "phone", 5 * 60_000, at(3))
    session = complete(session, at(10))
    assert session.actual_duration_minutes == 10
    assert session.completion_percentage == 40
