"""Persistence repositories for database operations."""

from xbs.infrastructure.persistence.repositories.bookmarks_repository import (
    BookmarksRepository,
)

__all__ = [
    "BookmarksRepository",
]
