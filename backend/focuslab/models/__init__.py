"""ORM Models — SQLAlchemy declarative models for persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Models are persistence only; domain values live in core/

Design Decisions:
    - All models imported here so Base.metadata is complete before
      create_all or alembic autogenerate runs
"""

from focuslab.models.timer_session import TimerSessionRecord  # noqa: F401
