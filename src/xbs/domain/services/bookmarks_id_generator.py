"""Bookmarks ID generator service.

Generates bookmarks IDs as 32 lowercase hex characters taken from a random
UUID4. The ID is the only credential a client holds for its bookmarks, so
it must come from a cryptographically secure source.
"""

import re
import uuid


class BookmarksIdGenerator:
    """Generator and validator for bookmarks IDs.

    Example IDs: 3f2a9c0e5b8d4e6fa1c27d9b0e4f8a61
    """

    # Regex pattern for valid bookmarks IDs
    PATTERN = re.compile(r"^[0-9a-f]{32}$")

    @classmethod
    def generate(cls) -> str:
        """Generate a new bookmarks ID.

        uuid4 draws from os.urandom, giving 122 random bits per ID.

        Returns:
            A new ID in 32-char hex format.
        """
        return uuid.uuid4().hex

    @classmethod
    def validate(cls, bookmarks_id: str) -> bool:
        """Validate that a bookmarks ID has the generated format.

        Args:
            bookmarks_id: The ID to validate.

        Returns:
            True if the ID matches the format, False otherwise.

        Examples:
            >>> BookmarksIdGenerator.validate("3f2a9c0e5b8d4e6fa1c27d9b0e4f8a61")
            True
            >>> BookmarksIdGenerator.validate("3F2A")
            False
        """
        if not isinstance(bookmarks_id, str):
            return False
        return bool(cls.PATTERN.match(bookmarks_id))
