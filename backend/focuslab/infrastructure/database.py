"""Database Session Manager — async connection pool with automatic rollback and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Connection pool uses pool_pre_ping for stale connection detection
    - Any SQLAlchemy exception escaping a request becomes DatabaseError (503),
      labelled "write" for integrity failures and "execute" otherwise
    - Driver messages are logged, never returned to the client

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
      (no global import side effects)
    - expire_on_commit=False: prevents lazy-load issues in async context
    - Pool sizing only passed for server databases; SQLite uses its own pool class
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy import text

from focuslab.core.errors import DatabaseError

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        engine_kwargs: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """One request's session. Rolls back and raises DatabaseError on failure.

        The repository handles integrity errors it can explain (a second active
        session); anything else reaching here is reported as a 503.
        """
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            operation = "write" if isinstance(e, IntegrityError) else "execute"
            logger.error(
                f"Timer store {operation} failed: {e.__class__.__name__}: {e}",
                extra={"operation": operation},
            )
            raise DatabaseError(_PUBLIC_REASONS[operation], operation) from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """SELECT 1 on a fresh connection (readiness probe)."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Timer store unreachable: {e}")
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()


_PUBLIC_REASONS = {
    "write": "Timer session could not be stored",
    "execute": "Timer store unavailable",
}

# Created in the app lifespan; read by get_db and the readiness probe
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    logger.info(
        f"Timer store initialized ({database_url.split('://', 1)[0]})",
    )
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Per-request AsyncSession for the timer repository."""
    if db_manager is None:
        raise DatabaseError("Timer store not initialized", "connect")
    async with db_manager.session() as session:
        yield session
