"""Sync service for xBrowserSync operations.

Maps each protocol operation onto exactly one bookmarks store call. The
service keeps no state besides the store handle; all synchronization
between concurrent requests happens inside the store.
"""

from typing import Protocol

from xbs.core.logging import get_logger
from xbs.domain.entities import Bookmarks, CreateResult, UpdateResult
from xbs.domain.exceptions import (
    BookmarksNotFoundError,
    NewSyncsForbiddenError,
    SyncDataLimitExceededError,
    VersionConflictError,
)

logger = get_logger(__name__)


class BookmarksStorePort(Protocol):
    """Storage operations the sync service relies on."""

    async def create(self) -> CreateResult: ...

    async def get_payload(self, bookmarks_id: str) -> Bookmarks: ...

    async def get_version(self, bookmarks_id: str) -> int: ...

    async def get_last_updated(self, bookmarks_id: str) -> str: ...

    async def update(
        self, bookmarks_id: str, payload: str, expected_version: int | None = None
    ) -> UpdateResult: ...


class SyncService:
    """Service for bookmarks sync business logic."""

    def __init__(
        self,
        store: BookmarksStorePort,
        max_sync_size: int | None = None,
        allow_new_syncs: bool = True,
    ) -> None:
        """Initialize the service.

        Args:
            store: Bookmarks store.
            max_sync_size: Largest accepted payload in bytes (UTF-8), None for no limit.
            allow_new_syncs: Whether new bookmarks may be created.
        """
        self.store = store
        self.max_sync_size = max_sync_size
        self.allow_new_syncs = allow_new_syncs

    async def create_bookmarks(self) -> CreateResult:
        """Create new empty bookmarks.

        Raises:
            NewSyncsForbiddenError: If new syncs are disabled.
            StorageError: If the database fails.
        """
        if not self.allow_new_syncs:
            logger.info("Bookmarks creation refused: new syncs disabled")
            raise NewSyncsForbiddenError()

        result = await self.store.create()
        logger.info("Bookmarks created", bookmarks_id=result.id, version=result.version)
        return result

    async def get_bookmarks(self, bookmarks_id: str) -> Bookmarks:
        """Get the payload, version and timestamp of bookmarks."""
        try:
            return await self.store.get_payload(bookmarks_id)
        except BookmarksNotFoundError:
            logger.info("Bookmarks not found", bookmarks_id=bookmarks_id)
            raise

    async def get_version(self, bookmarks_id: str) -> int:
        """Get the current version of bookmarks."""
        try:
            return await self.store.get_version(bookmarks_id)
        except BookmarksNotFoundError:
            logger.info("Bookmarks not found", bookmarks_id=bookmarks_id)
            raise

    async def get_last_updated(self, bookmarks_id: str) -> str:
        """Get the last-updated timestamp of bookmarks."""
        try:
            return await self.store.get_last_updated(bookmarks_id)
        except BookmarksNotFoundError:
            logger.info("Bookmarks not found", bookmarks_id=bookmarks_id)
            raise

    async def update_bookmarks(
        self,
        bookmarks_id: str,
        payload: str,
        expected_version: int | None = None,
    ) -> UpdateResult:
        """Replace the payload of bookmarks.

        A conflict is reported to the caller as-is and never retried here:
        the client has to re-fetch and decide whether to merge or overwrite.

        Args:
            bookmarks_id: The bookmarks ID.
            payload: New opaque payload.
            expected_version: Version the client last saw, None to overwrite.

        Raises:
            SyncDataLimitExceededError: If the payload is larger than max_sync_size.
            BookmarksNotFoundError: If the ID is unknown.
            VersionConflictError: If expected_version is not the current version.
            StorageError: If the database fails.
        """
        if self.max_sync_size is not None:
            size = len(payload.encode("utf-8"))
            if size > self.max_sync_size:
                logger.info(
                    "Bookmarks update refused: payload too large",
                    bookmarks_id=bookmarks_id,
                    size=size,
                    limit=self.max_sync_size,
                )
                raise SyncDataLimitExceededError(size, self.max_sync_size)

        try:
            result = await self.store.update(
                bookmarks_id, payload, expected_version=expected_version
            )
        except BookmarksNotFoundError:
            logger.info("Bookmarks not found", bookmarks_id=bookmarks_id)
            raise
        except VersionConflictError as e:
            logger.info(
                "Bookmarks update conflict",
                bookmarks_id=bookmarks_id,
                expected_version=e.expected_version,
                current_version=e.current_version,
            )
            raise

        logger.info(
            "Bookmarks updated",
            bookmarks_id=bookmarks_id,
            version=result.version,
            last_updated=result.last_updated,
        )
        return result
