"""Timer Session ORM — persisted row behind the TimerSession domain value.

Invariants:
    - id is UUID primary key
    - status/kind stored as their enum string values
    - version increments on every successful write (compare-and-swap key)
    - at most one running/paused row per owner (partial unique index)

Design Decisions:
    - Separate row class from core TimerSession: the state machine stays free of
      ORM instrumentation; the repository maps between the two
    - Partial unique index declared for both PostgreSQL and SQLite so the
      one-active-session rule holds in tests exactly as in production
    - tags and interruptions as JSON lists: small, never queried by element
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON, BigInteger, CheckConstraint, DateTime, Index, Integer, String, Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from focuslab.core.domain_types import MAX_OWNER_ID_LENGTH
from focuslab.db.base import Base

_ACTIVE_WHERE = text("status IN ('running', 'paused')")


class TimerSessionRecord(Base):
    """One timer session row."""
    __tablename__ = "timer_sessions"
    __table_args__ = (
        Index("ix_timer_sessions_owner_status", "owner_id", "status"),
        Index("ix_timer_sessions_owner_kind", "owner_id", "kind"),
        Index("ix_timer_sessions_owner_started", "owner_id", "started_at"),
        Index("ix_timer_sessions_goal", "goal_id"),
        Index(
            "uq_timer_sessions_owner_active", "owner_id", unique=True,
            postgresql_where=_ACTIVE_WHERE, sqlite_where=_ACTIVE_WHERE,
        ),
        CheckConstraint(
            "planned_duration_minutes BETWEEN 1 AND 480",
            name="ck_timer_sessions_planned_range",
        ),
        CheckConstraint(
            "total_paused_millis >= 0", name="ck_timer_sessions_paused_non_negative",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    owner_id: Mapped[str] = mapped_column(
        String(MAX_OWNER_ID_LENGTH), nullable=False,
    )
    goal_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="running",
    )
    planned_duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    actual_duration_minutes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    completion_percentage: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    ended_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    paused_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    total_paused_millis: Mapped[int] = mapped_column(
        BigInteger, nullable=False, default=0,
    )
    pause_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    interruptions: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    productivity_rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
