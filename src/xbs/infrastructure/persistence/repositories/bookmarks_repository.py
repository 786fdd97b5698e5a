"""Repository for bookmarks operations.

Provides the statements behind the bookmarks store. Methods run inside the
caller's session and never commit; transaction scope belongs to the caller.
"""

from sqlalchemy import Row, case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from xbs.domain.entities import INITIAL_VERSION
from xbs.infrastructure.persistence.models import BookmarksModel


class BookmarksRepository:
    """Repository for bookmarks database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def create(self, bookmarks_id: str, last_updated: str) -> BookmarksModel:
        """Insert empty bookmarks at the initial version.

        Args:
            bookmarks_id: The new bookmarks ID.
            last_updated: Creation timestamp.

        Returns:
            The created bookmarks model.

        Raises:
            IntegrityError: If the ID already exists (on flush).
        """
        bookmarks = BookmarksModel(
            id=bookmarks_id,
            payload="",
            version=INITIAL_VERSION,
            last_updated=last_updated,
        )
        self.session.add(bookmarks)
        await self.session.flush()
        return bookmarks

    async def get_by_id(self, bookmarks_id: str) -> BookmarksModel | None:
        """Get bookmarks by ID, all columns from one row read.

        Args:
            bookmarks_id: The bookmarks ID.

        Returns:
            The bookmarks model if found, None otherwise.
        """
        result = await self.session.execute(
            select(BookmarksModel).where(BookmarksModel.id == bookmarks_id)
        )
        return result.scalar_one_or_none()

    async def get_version(self, bookmarks_id: str) -> int | None:
        """Get the current version of bookmarks.

        Args:
            bookmarks_id: The bookmarks ID.

        Returns:
            The version if found, None otherwise.
        """
        result = await self.session.execute(
            select(BookmarksModel.version).where(BookmarksModel.id == bookmarks_id)
        )
        return result.scalar_one_or_none()

    async def get_last_updated(self, bookmarks_id: str) -> str | None:
        """Get the last-updated timestamp of bookmarks.

        Args:
            bookmarks_id: The bookmarks ID.

        Returns:
            The timestamp if found, None otherwise.
        """
        result = await self.session.execute(
            select(BookmarksModel.last_updated).where(BookmarksModel.id == bookmarks_id)
        )
        return result.scalar_one_or_none()

    async def update_payload(
        self,
        bookmarks_id: str,
        payload: str,
        last_updated: str,
        expected_version: int | None = None,
    ) -> Row | None:
        """Replace the payload and advance the version in one statement.

        The version comparison, the write and the version increment happen in
        a single conditional UPDATE, so two writers holding the same expected
        version cannot both match. The stored timestamp never moves backwards
        if the clock does.

        Args:
            bookmarks_id: The bookmarks ID.
            payload: New opaque payload.
            last_updated: Timestamp of this write.
            expected_version: Only update if the current version equals this.
                None updates unconditionally.

        Returns:
            Row of (version, last_updated) after the write, or None if no row
            matched (unknown ID or version mismatch).
        """
        stmt = update(BookmarksModel).where(BookmarksModel.id == bookmarks_id)
        if expected_version is not None:
            stmt = stmt.where(BookmarksModel.version == expected_version)

        stmt = (
            stmt.values(
                payload=payload,
                version=BookmarksModel.version + 1,
                last_updated=case(
                    (BookmarksModel.last_updated > last_updated, BookmarksModel.last_updated),
                    else_=last_updated,
                ),
            )
            .returning(BookmarksModel.version, BookmarksModel.last_updated)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.one_or_none()
