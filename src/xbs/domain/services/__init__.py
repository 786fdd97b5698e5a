"""Domain services for xbs.

Services contain business logic that doesn't naturally fit within a single entity.
"""

from xbs.domain.services.bookmarks_id_generator import BookmarksIdGenerator
from xbs.domain.services.clock import (
    TIMESTAMP_FORMAT,
    UtcClock,
    format_timestamp,
    parse_timestamp,
)
from xbs.domain.services.sync_service import BookmarksStorePort, SyncService

__all__ = [
    "BookmarksIdGenerator",
    "BookmarksStorePort",
    "SyncService",
    "TIMESTAMP_FORMAT",
    "UtcClock",
    "format_timestamp",
    "parse_timestamp",
]
