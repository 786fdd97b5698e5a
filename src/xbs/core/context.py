"""Application context.

The AppContext bundles everything a running server needs (settings,
database manager, bookmarks store and sync service). It is built once at
startup, handed to request handlers, and closed on shutdown.
"""

from dataclasses import dataclass

from xbs.core.config import Settings
from xbs.core.logging import close_logging, get_logger
from xbs.domain.services import SyncService, UtcClock
from xbs.infrastructure.persistence.bookmarks_store import BookmarksStore
from xbs.infrastructure.persistence.database import DatabaseManager

logger = get_logger(__name__)


@dataclass
class AppContext:
    """Explicitly constructed server state."""

    settings: Settings
    db: DatabaseManager
    store: BookmarksStore
    sync_service: SyncService

    @classmethod
    def build(cls, settings: Settings, clock: UtcClock | None = None) -> "AppContext":
        """Wire the context from settings without touching the database."""
        db = DatabaseManager(settings)
        store = BookmarksStore(db, clock=clock)
        sync_service = SyncService(
            store,
            max_sync_size=settings.max_sync_size,
            allow_new_syncs=settings.allow_new_syncs,
        )
        return cls(settings=settings, db=db, store=store, sync_service=sync_service)

    async def start(self) -> None:
        """Connect to the database and create missing tables."""
        await self.db.init()
        logger.info("Application context started")

    async def aclose(self) -> None:
        """Dispose database connections and flush the log file."""
        await self.db.disconnect()
        logger.info("Application context closed")
        close_logging()
