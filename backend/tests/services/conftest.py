"""Service test fixtures — async DB, repository, services and FastAPI test client.

Invariants:
    - Every test gets a fresh SQLite database file under tmp_path
    - get_db and get_clock dependencies overridden for route tests
    - db_manager patched so the readiness probe sees the test database
    - The clock never moves unless a test advances it

Design Decisions:
    - File-backed SQLite over :memory: so separate sessions really are separate
      connections; the compare-and-swap tests depend on it
"""

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from focuslab.api.dependencies import get_clock
from focuslab.db.base import Base
from focuslab.infrastructure.database import get_db, DatabaseSessionManager
from focuslab.infrastructure.timer_repository import SqlTimerSessionRepository
from focuslab.services.timer_lifecycle import TimerLifecycle
from focuslab.services.timer_reporting import TimerReporting
import focuslab.infrastructure.database as db_module
import focuslab.models  # noqa: F401
from focuslab.main import app
from tests.fakes import FixedClock


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'focuslab.db'}", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def repository(test_db):
    return SqlTimerSessionRepository(test_db)


@pytest.fixture
def lifecycle(repository, clock):
    return TimerLifecycle(repository, clock)


@pytest.fixture
def reporting(repository, clock):
    return TimerReporting(repository, clock)


@pytest.fixture
async def client(test_engine, test_session_factory, clock):
    """FastAPI test client with DB and clock dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
        headers={"X-User-Id": "user-1"},
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
