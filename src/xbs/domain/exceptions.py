"""Sync-specific exceptions.

Every failure of a sync operation is raised as a subclass of SyncError.
The ``code`` attribute is the exception name xBrowserSync clients expect
in error responses.
"""


class SyncError(Exception):
    """Base exception for sync errors."""

    code = "SyncException"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class BookmarksNotFoundError(SyncError):
    """Raised when no bookmarks exist for the given ID."""

    code = "NotFoundException"

    def __init__(self, bookmarks_id: str) -> None:
        self.bookmarks_id = bookmarks_id
        super().__init__(f"Bookmarks '{bookmarks_id}' not found")


class VersionConflictError(SyncError):
    """Raised when an update's expected version is not the current version.

    The update was not applied. ``current_version`` is the version the
    caller raced against, so it can re-fetch and decide how to proceed.
    """

    code = "SyncConflictException"

    def __init__(
        self, bookmarks_id: str, expected_version: int, current_version: int
    ) -> None:
        self.bookmarks_id = bookmarks_id
        self.expected_version = expected_version
        self.current_version = current_version
        super().__init__(
            f"Bookmarks '{bookmarks_id}' are at version {current_version}, "
            f"expected {expected_version}"
        )


class StorageError(SyncError):
    """Raised when the underlying database fails.

    Whether a write landed is decided by the transaction: a StorageError
    raised before commit means nothing was written.
    """

    code = "StorageException"


class NewSyncsForbiddenError(SyncError):
    """Raised when creating bookmarks while new syncs are disabled."""

    code = "NewSyncsForbiddenException"

    def __init__(self) -> None:
        super().__init__("The service is not accepting new syncs")


class SyncDataLimitExceededError(SyncError):
    """Raised when a bookmarks payload is larger than max_sync_size."""

    code = "SyncDataLimitExceededException"

    def __init__(self, size: int, limit: int) -> None:
        self.size = size
        self.limit = limit
        super().__init__(f"Sync data of {size} bytes exceeds the limit of {limit} bytes")
