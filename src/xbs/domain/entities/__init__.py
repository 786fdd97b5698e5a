"""Domain entities for xbs.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from xbs.domain.entities.bookmarks import (
    INITIAL_VERSION,
    Bookmarks,
    CreateResult,
    UpdateResult,
)

__all__ = [
    "INITIAL_VERSION",
    "Bookmarks",
    "CreateResult",
    "UpdateResult",
]
