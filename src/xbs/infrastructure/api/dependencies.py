"""FastAPI dependencies.

Handlers reach the AppContext built at startup through these dependencies
instead of module-level globals.
"""

from typing import Annotated

from fastapi import Depends, Path, Request

from xbs.core.context import AppContext
from xbs.domain.exceptions import BookmarksNotFoundError
from xbs.domain.services import BookmarksIdGenerator, SyncService


def get_app_context(request: Request) -> AppContext:
    """Return the AppContext stored on the application.

    Raises:
        RuntimeError: If the application was not started.
    """
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise RuntimeError("Application context is not initialized")
    return context


def get_sync_service(
    context: Annotated[AppContext, Depends(get_app_context)],
) -> SyncService:
    """Return the sync service of the running application."""
    return context.sync_service


def valid_bookmarks_id(bookmarks_id: Annotated[str, Path()]) -> str:
    """Reject IDs that cannot have been generated, without a database lookup.

    Raises:
        BookmarksNotFoundError: If the ID has the wrong format.
    """
    if not BookmarksIdGenerator.validate(bookmarks_id):
        raise BookmarksNotFoundError(bookmarks_id)
    return bookmarks_id


AppContextDep = Annotated[AppContext, Depends(get_app_context)]
SyncServiceDep = Annotated[SyncService, Depends(get_sync_service)]
BookmarksId = Annotated[str, Depends(valid_bookmarks_id)]
