"""API Routes for xbs."""

from .bookmarks_router import router as bookmarks_router
from .info_router import router as info_router

__all__ = [
    "bookmarks_router",
    "info_router",
]
