"""create_bookmarks_table

Revision ID: 4c1f2b7d9e10
Revises:
Create Date: 2026-10-19 10:12:31.482051

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = '4c1f2b7d9e10'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "bookmarks",
        sa.Column(
            "id",
            sa.String(length=32),
            nullable=False,
            comment="Bookmarks ID (hex UUID)",
        ),
        sa.Column(
            "payload",
            sa.Text(),
            nullable=False,
            comment="Opaque client-encrypted bookmarks data",
        ),
        sa.Column(
            "version",
            sa.Integer(),
            nullable=False,
            comment="Write counter for optimistic concurrency",
        ),
        sa.Column(
            "last_updated",
            sa.String(length=27),
            nullable=False,
            comment="UTC timestamp of the last write",
        ),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("bookmarks")
