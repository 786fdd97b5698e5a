"""Pydantic schemas for the service info API."""

from enum import IntEnum

from pydantic import Field

from xbs.infrastructure.api.schemas.bookmarks_schemas import CamelModel


class ServiceStatus(IntEnum):
    """Service status codes understood by xBrowserSync clients."""

    ONLINE = 1
    OFFLINE = 2
    NO_NEW_SYNCS = 3


class ServiceInfoResponse(CamelModel):
    """Response for GET /info."""

    status: ServiceStatus
    message: str = ""
    version: str = Field(..., description="Server API version")
    max_sync_size: int = Field(..., description="Largest accepted payload in bytes")
