"""Pydantic schemas for the bookmarks API.

Field names follow the xBrowserSync wire format (camelCase).
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serializing snake_case fields as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateBookmarksRequest(CamelModel):
    """Request body for creating bookmarks.

    Clients send their own app version; it is accepted but not stored.
    """

    version: str | None = Field(None, description="Client application version")


class CreateBookmarksResponse(CamelModel):
    """Response for newly created bookmarks."""

    id: str = Field(..., description="New bookmarks ID")
    last_updated: str = Field(..., description="UTC creation timestamp")
    version: int = Field(..., description="Initial bookmarks version")


class GetBookmarksResponse(CamelModel):
    """Response carrying the current bookmarks payload."""

    bookmarks: str = Field(..., description="Opaque bookmarks data")
    version: int
    last_updated: str


class UpdateBookmarksRequest(CamelModel):
    """Request body for replacing bookmarks."""

    bookmarks: str = Field(..., description="New opaque bookmarks data")
    expected_version: int | None = Field(
        None,
        ge=1,
        description="Version the client last saw; omit to overwrite unconditionally",
    )


class UpdateBookmarksResponse(CamelModel):
    """Response for a successful update."""

    version: int
    last_updated: str


class GetVersionResponse(CamelModel):
    """Response carrying only the bookmarks version."""

    version: int


class GetLastUpdatedResponse(CamelModel):
    """Response carrying only the last-updated timestamp."""

    last_updated: str


class ErrorResponse(CamelModel):
    """Error body returned for failed sync operations."""

    code: str = Field(..., description="xBrowserSync exception name")
    message: str
    current_version: int | None = Field(
        None, description="Current version, set on sync conflicts"
    )
