"""Initial schema — timer_sessions with one-active-session-per-owner index.

Revision ID: 001_timer_sessions
Revises: None
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_timer_sessions"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_ACTIVE_WHERE = sa.text("status IN ('running', 'paused')")


def upgrade() -> None:
    op.create_table(
        "timer_sessions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("goal_id", sa.String(64), nullable=True),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("title", sa.String(100), nullable=False, server_default=""),
        sa.Column("status", sa.String(20), nullable=False, server_default="running"),
        sa.Column("planned_duration_minutes", sa.Integer, nullable=False),
        sa.Column("actual_duration_minutes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("completion_percentage", sa.Integer, nullable=False, server_default="0"),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("paused_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_paused_millis", sa.BigInteger, nullable=False, server_default="0"),
        sa.Column("pause_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("notes", sa.Text, nullable=False, server_default=""),
        sa.Column("tags", sa.JSON, nullable=False),
        sa.Column("productivity_rating", sa.Integer, nullable=True),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "planned_duration_minutes BETWEEN 1 AND 480",
            name="ck_timer_sessions_planned_range",
        ),
        sa.CheckConstraint(
            "total_paused_millis >= 0", name="ck_timer_sessions_paused_non_negative",
        ),
    )
    op.create_index(
        "ix_timer_sessions_owner_status", "timer_sessions", ["owner_id", "status"],
    )
    op.create_index(
        "ix_timer_sessions_owner_kind", "timer_sessions", ["owner_id", "kind"],
    )
    op.create_index(
        "ix_timer_sessions_owner_started", "timer_sessions", ["owner_id", "started_at"],
    )
    op.create_index("ix_timer_sessions_goal", "timer_sessions", ["goal_id"])
    op.create_index(
        "uq_timer_sessions_owner_active", "timer_sessions", ["owner_id"],
        unique=True, postgresql_where=_ACTIVE_WHERE,
    )


def downgrade() -> None:
    op.drop_index("uq_timer_sessions_owner_active", table_name="timer_sessions")
    op.drop_index("ix_timer_sessions_goal", table_name="timer_sessions")
    op.drop_index("ix_timer_sessions_owner_started", table_name="timer_sessions")
    op.drop_index("ix_timer_sessions_owner_kind", table_name="timer_sessions")
    op.drop_index("ix_timer_sessions_owner_status", table_name="timer_sessions")
    op.drop_table("timer_sessions")
