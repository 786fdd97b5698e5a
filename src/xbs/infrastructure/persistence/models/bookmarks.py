"""SQLAlchemy model for the bookmarks table."""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from xbs.domain.entities import Bookmarks
from xbs.infrastructure.persistence.database import Base


class BookmarksModel(Base):
    """SQLAlchemy model for the bookmarks table.

    One row per bookmarks ID. All four columns are written together, so a
    row is never partially populated.

    Attributes:
        id: Server-generated 32-char hex ID.
        payload: Opaque client-encrypted bookmarks data.
        version: Write counter, incremented by every update.
        last_updated: UTC timestamp of the last write (fixed-width ISO-8601).
    """

    __tablename__ = "bookmarks"

    id: Mapped[str] = mapped_column(
        String(32),
        primary_key=True,
        comment="Bookmarks ID (hex UUID)",
    )
    payload: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Opaque client-encrypted bookmarks data",
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Write counter for optimistic concurrency",
    )
    last_updated: Mapped[str] = mapped_column(
        String(27),
        nullable=False,
        comment="UTC timestamp of the last write",
    )

    def to_entity(self) -> Bookmarks:
        """Convert the row to a Bookmarks domain entity."""
        return Bookmarks(
            id=self.id,
            payload=self.payload,
            version=self.version,
            last_updated=self.last_updated,
        )

    def __repr__(self) -> str:
        return f"<Bookmarks(id='{self.id}', version={self.version})>"
