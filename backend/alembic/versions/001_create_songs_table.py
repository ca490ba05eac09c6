"""Create songs table

Revision ID: 001
Revises: None
Create Date: 2024-11-02 00:00:00.000000+00:00

What:  Creates the `songs` table backing the catalog.
How:   Integer identity key, one lookup index on (group_name, song_name).

Rollback: downgrade() drops the table entirely (all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the songs table and its lookup index."""
    op.create_table(
        "songs",
        sa.Column(
            "id",
            sa.Integer(),
            autoincrement=True,
            nullable=False,
            comment="Surrogate key assigned by the database",
        ),
        sa.Column(
            "group_name",
            sa.String(255),
            nullable=False,
            comment="Performing group or artist",
        ),
        sa.Column(
            "song_name",
            sa.String(255),
            nullable=False,
            comment="Song title",
        ),
        sa.Column(
            "release_date",
            sa.String(64),
            nullable=False,
            server_default=sa.text("''"),
            comment="Release date as supplied by the client",
        ),
        sa.Column(
            "text",
            sa.Text(),
            nullable=False,
            server_default=sa.text("''"),
            comment="Lyrics, verses separated by newlines",
        ),
        sa.Column(
            "link",
            sa.String(1024),
            nullable=False,
            server_default=sa.text("''"),
            comment="External link (e.g. a video URL)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # Not unique: duplicate (group, song) pairs are allowed
    op.create_index(
        "idx_songs_group_song",
        "songs",
        ["group_name", "song_name"],
    )


def downgrade() -> None:
    """Drop the songs table. Destructive."""
    op.drop_index("idx_songs_group_song", table_name="songs")
    op.drop_table("songs")
