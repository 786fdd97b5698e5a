"""SQLAlchemy models for xbs.

All models inherit from the Base class defined in database.py and are
created on application startup outside production.
"""

from xbs.infrastructure.persistence.models.bookmarks import BookmarksModel

__all__ = [
    "BookmarksModel",
]
