"""Pydantic schemas for API request/response validation."""

from xbs.infrastructure.api.schemas.bookmarks_schemas import (
    CreateBookmarksRequest,
    CreateBookmarksResponse,
    ErrorResponse,
    GetBookmarksResponse,
    GetLastUpdatedResponse,
    GetVersionResponse,
    UpdateBookmarksRequest,
    UpdateBookmarksResponse,
)
from xbs.infrastructure.api.schemas.info_schemas import (
    ServiceInfoResponse,
    ServiceStatus,
)

__all__ = [
    "CreateBookmarksRequest",
    "CreateBookmarksResponse",
    "ErrorResponse",
    "GetBookmarksResponse",
    "GetLastUpdatedResponse",
    "GetVersionResponse",
    "ServiceInfoResponse",
    "ServiceStatus",
    "UpdateBookmarksRequest",
    "UpdateBookmarksResponse",
]
