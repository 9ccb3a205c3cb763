"""Add interruptions log to timer_sessions.

Revision ID: 002_add_interruptions
Revises: 001_timer_sessions
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "002_add_interruptions"
down_revision: Union[str, None] = "001_timer_sessions"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.add_column(
        "timer_sessions",
        sa.Column(
            "interruptions", sa.JSON, nullable=False,
            server_default=sa.text("'[]'"),
        ),
    )


def downgrade() -> None:
    op.drop_column("timer_sessions", "interruptions")
