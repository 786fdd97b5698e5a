"""Bookmarks entity and the results of sync operations.

A Bookmarks record is the unit of synchronization: one opaque,
client-encrypted blob plus the version and timestamp of its last write.
"""

from dataclasses import dataclass

# Version assigned to newly created bookmarks.
INITIAL_VERSION = 1


@dataclass(frozen=True)
class Bookmarks:
    """Bookmarks entity.

    Attributes:
        id: Server-generated 32-char hex ID, also the access capability.
        payload: Opaque client data, never parsed by the server.
        version: Write counter, starts at INITIAL_VERSION.
        last_updated: UTC timestamp of the last write (sortable ISO-8601).
    """

    id: str
    payload: str
    version: int
    last_updated: str

    def __post_init__(self) -> None:
        """Validate bookmarks data after initialization."""
        if not self.id:
            raise ValueError("Bookmarks ID is required")
        if self.version < INITIAL_VERSION:
            raise ValueError(f"Version must be at least {INITIAL_VERSION}")


@dataclass(frozen=True)
class UpdateResult:
    """Outcome of a successful create or update."""

    version: int
    last_updated: str


@dataclass(frozen=True)
class CreateResult(UpdateResult):
    """Outcome of a successful create, with the new ID."""

    id: str
