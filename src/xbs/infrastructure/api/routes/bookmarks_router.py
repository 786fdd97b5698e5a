"""API routes for bookmarks sync.

Routes are declared as a dispatch table of (method, path) to handler.
Handlers only translate between HTTP and the sync service; errors raised
by the service are rendered by the exception handlers registered in app.py.
"""

from typing import Any, Callable

from fastapi import APIRouter

from xbs.core.logging import get_logger
from xbs.infrastructure.api.dependencies import BookmarksId, SyncServiceDep
from xbs.infrastructure.api.schemas import (
    CreateBookmarksRequest,
    CreateBookmarksResponse,
    ErrorResponse,
    GetBookmarksResponse,
    GetLastUpdatedResponse,
    GetVersionResponse,
    UpdateBookmarksRequest,
    UpdateBookmarksResponse,
)

logger = get_logger(__name__)


async def create_bookmarks(
    sync_service: SyncServiceDep,
    body: CreateBookmarksRequest | None = None,
) -> CreateBookmarksResponse:
    """Create new empty bookmarks and return their ID."""
    if body is not None and body.version:
        logger.debug("Create requested by client", client_version=body.version)
    result = await sync_service.create_bookmarks()
    return CreateBookmarksResponse(
        id=result.id, last_updated=result.last_updated, version=result.version
    )


async def get_bookmarks(
    bookmarks_id: BookmarksId,
    sync_service: SyncServiceDep,
) -> GetBookmarksResponse:
    """Get the bookmarks payload with its version and timestamp."""
    bookmarks = await sync_service.get_bookmarks(bookmarks_id)
    return GetBookmarksResponse(
        bookmarks=bookmarks.payload,
        version=bookmarks.version,
        last_updated=bookmarks.last_updated,
    )


async def update_bookmarks(
    bookmarks_id: BookmarksId,
    body: UpdateBookmarksRequest,
    sync_service: SyncServiceDep,
) -> UpdateBookmarksResponse:
    """Replace the bookmarks payload.

    When ``expectedVersion`` is given and is stale, the update is rejected
    with 409 and the current version.
    """
    result = await sync_service.update_bookmarks(
        bookmarks_id, body.bookmarks, expected_version=body.expected_version
    )
    return UpdateBookmarksResponse(version=result.version, last_updated=result.last_updated)


async def get_version(
    bookmarks_id: BookmarksId,
    sync_service: SyncServiceDep,
) -> GetVersionResponse:
    """Get the bookmarks version only."""
    version = await sync_service.get_version(bookmarks_id)
    return GetVersionResponse(version=version)


async def get_last_updated(
    bookmarks_id: BookmarksId,
    sync_service: SyncServiceDep,
) -> GetLastUpdatedResponse:
    """Get the bookmarks last-updated timestamp only."""
    last_updated = await sync_service.get_last_updated(bookmarks_id)
    return GetLastUpdatedResponse(last_updated=last_updated)


_NOT_FOUND = {404: {"model": ErrorResponse}}

# (method, path, handler, response model, extra documented responses)
BOOKMARKS_ROUTES: tuple[tuple[str, str, Callable[..., Any], type, dict], ...] = (
    ("POST", "", create_bookmarks, CreateBookmarksResponse, {405: {"model": ErrorResponse}}),
    # The original xbs server created bookmarks with PUT /bookmarks
    ("PUT", "", create_bookmarks, CreateBookmarksResponse, {405: {"model": ErrorResponse}}),
    ("GET", "/{bookmarks_id}", get_bookmarks, GetBookmarksResponse, _NOT_FOUND),
    (
        "PUT",
        "/{bookmarks_id}",
        update_bookmarks,
        UpdateBookmarksResponse,
        {**_NOT_FOUND, 409: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
    ),
    ("GET", "/{bookmarks_id}/version", get_version, GetVersionResponse, _NOT_FOUND),
    ("GET", "/{bookmarks_id}/lastUpdated", get_last_updated, GetLastUpdatedResponse, _NOT_FOUND),
)

router = APIRouter(prefix="/bookmarks")

for method, path, endpoint, response_model, responses in BOOKMARKS_ROUTES:
    router.add_api_route(
        path,
        endpoint,
        methods=[method],
        response_model=response_model,
        responses=responses,
        name=f"{endpoint.__name__}_{method.lower()}",
    )
