"""Durable bookmarks store.

The store owns transaction scope for every bookmarks operation: each call
opens its own session, runs its statements and commits or rolls back
before returning. It stamps IDs, versions and timestamps and turns
database failures into StorageError.
"""

from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from xbs.core.logging import get_logger
from xbs.domain.entities import Bookmarks, CreateResult, UpdateResult
from xbs.domain.exceptions import (
    BookmarksNotFoundError,
    StorageError,
    VersionConflictError,
)
from xbs.domain.services.bookmarks_id_generator import BookmarksIdGenerator
from xbs.domain.services.clock import UtcClock
from xbs.infrastructure.persistence.database import DatabaseManager
from xbs.infrastructure.persistence.repositories import BookmarksRepository

logger = get_logger(__name__)

# Attempts at inserting a fresh ID before giving up on create.
MAX_ID_ATTEMPTS = 3


@contextmanager
def storage_errors(operation: str, **context: str) -> Iterator[None]:
    """Re-raise database errors from the enclosed block as StorageError."""
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Storage failure", operation=operation, error=str(e), **context)
        raise StorageError(f"Storage failure during {operation}") from e


class BookmarksStore:
    """Concurrency-safe persistence of bookmarks."""

    def __init__(
        self,
        db: DatabaseManager,
        id_generator: Callable[[], str] = BookmarksIdGenerator.generate,
        clock: UtcClock | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            db: Database manager providing sessions.
            id_generator: Callable returning a new bookmarks ID.
            clock: Source of write timestamps.
        """
        self.db = db
        self.id_generator = id_generator
        self.clock = clock or UtcClock()

    async def create(self) -> CreateResult:
        """Create empty bookmarks under a fresh ID.

        Returns:
            The new ID with its initial version and timestamp.

        Raises:
            StorageError: If the database fails or no unused ID was found.
        """
        for attempt in range(1, MAX_ID_ATTEMPTS + 1):
            bookmarks_id = self.id_generator()
            try:
                with storage_errors("create", bookmarks_id=bookmarks_id):
                    async with self.db.session() as session:
                        created = await BookmarksRepository(session).create(
                            bookmarks_id, self.clock.now()
                        )
                        await session.commit()
            except StorageError as e:
                if not isinstance(e.__cause__, IntegrityError):
                    raise
                logger.warning("Bookmarks ID collision", attempt=attempt)
                continue

            logger.debug("Bookmarks created", bookmarks_id=bookmarks_id)
            return CreateResult(
                id=created.id,
                version=created.version,
                last_updated=created.last_updated,
            )

        raise StorageError(
            f"Could not allocate a bookmarks ID after {MAX_ID_ATTEMPTS} attempts"
        )

    async def get_payload(self, bookmarks_id: str) -> Bookmarks:
        """Get a point-in-time snapshot of bookmarks.

        Raises:
            BookmarksNotFoundError: If the ID is unknown.
            StorageError: If the database fails.
        """
        with storage_errors("get_payload", bookmarks_id=bookmarks_id):
            async with self.db.session() as session:
                bookmarks = await BookmarksRepository(session).get_by_id(bookmarks_id)

        if bookmarks is None:
            raise BookmarksNotFoundError(bookmarks_id)
        return bookmarks.to_entity()

    async def get_version(self, bookmarks_id: str) -> int:
        """Get the current version of bookmarks.

        Raises:
            BookmarksNotFoundError: If the ID is unknown.
            StorageError: If the database fails.
        """
        with storage_errors("get_version", bookmarks_id=bookmarks_id):
            async with self.db.session() as session:
                version = await BookmarksRepository(session).get_version(bookmarks_id)

        if version is None:
            raise BookmarksNotFoundError(bookmarks_id)
        return version

    async def get_last_updated(self, bookmarks_id: str) -> str:
        """Get the last-updated timestamp of bookmarks.

        Raises:
            BookmarksNotFoundError: If the ID is unknown.
            StorageError: If the database fails.
        """
        with storage_errors("get_last_updated", bookmarks_id=bookmarks_id):
            async with self.db.session() as session:
                last_updated = await BookmarksRepository(session).get_last_updated(
                    bookmarks_id
                )

        if last_updated is None:
            raise BookmarksNotFoundError(bookmarks_id)
        return last_updated

    async def update(
        self,
        bookmarks_id: str,
        payload: str,
        expected_version: int | None = None,
    ) -> UpdateResult:
        """Replace the payload of bookmarks and advance their version.

        With ``expected_version`` the write only applies if it equals the
        current version; of several concurrent updates holding the same
        version exactly one succeeds. Without it the write always applies.

        Returns:
            The new version and timestamp.

        Raises:
            BookmarksNotFoundError: If the ID is unknown. Nothing is written.
            VersionConflictError: If the version did not match. Nothing is written.
            StorageError: If the database fails.
        """
        with storage_errors("update", bookmarks_id=bookmarks_id):
            async with self.db.session() as session:
                repository = BookmarksRepository(session)
                row = await repository.update_payload(
                    bookmarks_id,
                    payload,
                    self.clock.now(),
                    expected_version=expected_version,
                )
                if row is None:
                    # Read inside the same transaction to tell the two misses apart
                    current_version = await repository.get_version(bookmarks_id)
                    await session.rollback()
                else:
                    await session.commit()

        if row is not None:
            return UpdateResult(version=row.version, last_updated=row.last_updated)

        if current_version is None:
            raise BookmarksNotFoundError(bookmarks_id)
        raise VersionConflictError(
            bookmarks_id,
            expected_version=expected_version,
            current_version=current_version,
        )
