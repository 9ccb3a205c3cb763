"""Timer Lifecycle — imperative shell around the pure timer state machine.

Invariants:
    - Every operation: load -> pure transition (core) -> compare-and-swap save
    - `now` is read once per operation from the injected Clock
    - A failed transition writes nothing (core raises before save is called)
    - At most one running/paused session per owner (checked here, enforced by the DB)
    - Sessions owned by someone else are reported as not found

Design Decisions:
    - Impureim sandwich: IO at the edges, core/timer_transitions.py in the middle
    - Lazy expiry on single-session reads; batch expiry via sweep_expired()
    - pause, resume and add_interruption expire an overdue running session
      first (persisted), then fail from `expired`; a paused session never
      expires, so pausing one that is already overdue would strand it
    - complete and cancel skip that step: a late finish is recorded as
      completed or cancelled at 100%
    - No retries: ConcurrencyError propagates; the caller may retry the whole call
"""

import logging
from dataclasses import replace
from uuid import UUID

from focuslab.core import timer_transitions
from focuslab.core.domain_types import SessionId, TimerOperation
from focuslab.core.errors import (
    ActiveSessionExistsError, ConcurrencyError, ResourceNotFoundError,
    SessionValidationError,
)
from focuslab.core.repository_protocols import Clock, TimerSessionRepository
from focuslab.core.timer_session import TimerSession
from focuslab.core.validate_session import (
    SessionDraft, build_session, validate_completion_details,
    validate_interruption, validate_session_draft,
)

logger = logging.getLogger(__name__)


class TimerLifecycle:
    """Start and transition timer sessions through a repository and a clock."""

    def __init__(self, repository: TimerSessionRepository, clock: Clock):
        self.repository = repository
        self.clock = clock

    # ─── Start ──────────────────────────────────────────────────

    async def start(self, draft: SessionDraft) -> TimerSession:
        """Validate, enforce one active session per owner, create as running."""
        result = validate_session_draft(draft)
        if not result.ok:
            logger.warning(
                f"Rejected timer start: {[e.field for e in result.errors]}",
                extra={"owner_id": draft.owner_id},
            )
            raise SessionValidationError(list(result.errors))

        active = await self.get_active(draft.owner_id)
        if active is not None:
            raise ActiveSessionExistsError(draft.owner_id)

        session = await self.repository.add(build_session(draft, self.clock.now()))
        logger.info(
            f"Timer started: {session.title} ({session.kind.value}, "
            f"{session.planned_duration_minutes}min)",
            extra={
                "session_id": str(session.id), "owner_id": session.owner_id,
                "operation": "start", "status": session.status.value,
            },
        )
        return session

    # ─── Reads ──────────────────────────────────────────────────

    async def get(self, session_id: UUID, owner_id: str) -> TimerSession:
        """Load an owned session, expiring it first if it ran over."""
        session = await self.load_owned(session_id, owner_id)
        return await self._expire_on_read(session)

    async def get_active(self, owner_id: str) -> TimerSession | None:
        """The owner's running/paused session, or None once it has expired."""
        session = await self.repository.find_active_for_owner(owner_id)
        if session is None:
            return None
        session = await self._expire_on_read(session)
        return None if session.is_terminal else session

    # ─── Transitions ────────────────────────────────────────────

    async def pause(self, session: TimerSession) -> TimerSession:
        return await self._apply(
            session, TimerOperation.PAUSE, timer_transitions.pause, expire_first=True,
        )

    async def resume(self, session: TimerSession) -> TimerSession:
        return await self._apply(
            session, TimerOperation.RESUME, timer_transitions.resume, expire_first=True,
        )

    async def complete(
        self,
        session: TimerSession,
        notes: str | None = None,
        productivity_rating: int | None = None,
    ) -> TimerSession:
        """Complete, recording optional notes and rating in the same write."""
        details = validate_completion_details(notes, productivity_rating)
        if not details.ok:
            raise SessionValidationError(list(details.errors))

        def _complete(current: TimerSession, now) -> TimerSession:
            done = timer_transitions.complete(current, now)
            return replace(
                done,
                notes=notes.strip() if notes is not None else done.notes,
                productivity_rating=(
                    productivity_rating
                    if productivity_rating is not None
                    else done.productivity_rating
                ),
            )

        return await self._apply(session, TimerOperation.COMPLETE, _complete)

    async def cancel(self, session: TimerSession) -> TimerSession:
        return await self._apply(session, TimerOperation.CANCEL, timer_transitions.cancel)

    async def add_interruption(
        self, session: TimerSession, reason: str, duration_millis: int,
    ) -> TimerSession:
        """Append an interruption to a running or paused session."""
        details = validate_interruption(reason, duration_millis)
        if not details.ok:
            raise SessionValidationError(list(details.errors))

        def _interrupt(current: TimerSession, now) -> TimerSession:
            return timer_transitions.add_interruption(
                current, reason, duration_millis, now,
            )

        return await self._apply(
            session, TimerOperation.INTERRUPT, _interrupt, expire_first=True,
        )

    async def expire(self, session: TimerSession) -> TimerSession:
        """Expire if overdue; returns the session unchanged (and unsaved) otherwise."""
        now = self.clock.now()
        expired = timer_transitions.expire(session, now)
        if expired is session:
            return session
        saved = await self.repository.save(expired)
        _log_transition(saved, TimerOperation.EXPIRE)
        return saved

    async def sweep_expired(self) -> list[TimerSession]:
        """Expire every overdue running session. Conflicting records are skipped."""
        expired: list[TimerSession] = []
        for session in await self.repository.list_running():
            try:
                result = await self.expire(session)
            except ConcurrencyError:
                logger.warning(
                    f"Skipped expiring timer {session.id}: modified concurrently",
                    extra={"session_id": str(session.id), "operation": "expire"},
                )
                continue
            if result is not session:
                expired.append(result)
        logger.info(
            f"Expiry sweep finished: {len(expired)} session(s) expired",
            extra={"expired_count": len(expired), "operation": "expire"},
        )
        return expired

    # ─── Helpers ────────────────────────────────────────────────

    async def load_owned(self, session_id: UUID, owner_id: str) -> TimerSession:
        """Load without expiring; foreign sessions look missing."""
        session = await self.repository.load(SessionId(session_id))
        if session is None or session.owner_id != owner_id:
            raise ResourceNotFoundError("Timer session", str(session_id))
        return session

    async def _apply(
        self,
        session: TimerSession,
        operation: TimerOperation,
        transition,
        *,
        expire_first: bool = False,
    ) -> TimerSession:
        now = self.clock.now()
        if expire_first and timer_transitions.should_expire(session, now):
            session = await self.repository.save(timer_transitions.expire(session, now))
            _log_transition(session, TimerOperation.EXPIRE)
        updated = transition(session, now)
        saved = await self.repository.save(updated)
        _log_transition(saved, operation)
        return saved

    async def _expire_on_read(self, session: TimerSession) -> TimerSession:
        try:
            return await self.expire(session)
        except ConcurrencyError:
            # Another writer got there first; report what is stored now
            reloaded = await self.repository.load(SessionId(session.id))
            return reloaded or session


def _log_transition(session: TimerSession, operation: TimerOperation) -> None:
    logger.info(
        f"Timer {operation.value}: {session.id} -> {session.status.value}",
        extra={
            "session_id": str(session.id),
            "owner_id": session.owner_id,
            "operation": operation.value,
            "status": session.status.value,
        },
    )
