"""Alembic environment — migrations for the timer_sessions schema.

Design Decisions:
    - URL comes from focuslab.config.Settings, so migrations and the app agree on
      DATABASE_URL, .env and the postgresql:// -> postgresql+asyncpg:// rewrite
    - alembic.ini's sqlalchemy.url is used only with `-x use_ini=1`
    - Online mode runs on the app's async driver through run_sync
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config

from alembic import context

from focuslab.config import get_settings
from focuslab.db.base import Base
import focuslab.models  # noqa: F401  (registers TimerSessionRecord on Base.metadata)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    if context.get_x_argument(as_dictionary=True).get("use_ini"):
        return config.get_main_option("sqlalchemy.url")
    return get_settings().database_url


def run_migrations_offline() -> None:
    """Emit SQL for the timer schema without connecting."""
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=connection.dialect.name == "sqlite",
    )
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _database_url()
    engine = async_engine_from_config(
        section, prefix="sqlalchemy.", poolclass=pool.NullPool,
    )
    async with engine.connect() as connection:
        await connection.run_sync(_migrate)
    await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
