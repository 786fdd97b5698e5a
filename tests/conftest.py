"""Pytest configuration for all tests."""

from pathlib import Path
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from xbs.core.config import Settings
from xbs.core.context import AppContext
from xbs.infrastructure.api.app import create_app
from xbs.infrastructure.persistence.bookmarks_store import BookmarksStore
from xbs.infrastructure.persistence.database import DatabaseManager


class FakeClock:
    """Clock returning preset timestamps, repeating the last one."""

    def __init__(self, *timestamps: str) -> None:
        self.timestamps = list(timestamps)

    def now(self) -> str:
        if len(self.timestamps) > 1:
            return self.timestamps.pop(0)
        return self.timestamps[0]


@pytest.fixture
def fake_clock_factory():
    """Build FakeClock instances."""
    return FakeClock


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing at a fresh SQLite file database.

    A file database (not :memory:) gives every session its own connection,
    so concurrent transactions really contend for the row.
    """
    return Settings(
        environment="testing",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'xbs.db'}",
        log_format="console",
        max_sync_size=1024,
    )


@pytest_asyncio.fixture
async def db_manager(settings: Settings) -> AsyncGenerator[DatabaseManager, None]:
    """Create a database manager with the tables created."""
    db = DatabaseManager(settings)
    await db.init()
    yield db
    await db.disconnect()


@pytest_asyncio.fixture
async def store(db_manager: DatabaseManager) -> BookmarksStore:
    """Create a bookmarks store over the test database."""
    return BookmarksStore(db_manager)


@pytest_asyncio.fixture
async def app_context(settings: Settings) -> AsyncGenerator[AppContext, None]:
    """Create and start an application context."""
    context = AppContext.build(settings)
    await context.start()
    yield context
    await context.aclose()


@pytest_asyncio.fixture
async def client(
    settings: Settings, app_context: AppContext
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client for an app running on the test context.

    ASGITransport does not run the lifespan, so the started context is
    attached to the app directly.
    """
    app = create_app(settings)
    app.state.context = app_context

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
