"""
SongCatalog Backend: Song SQLAlchemy Model
===========================================

What:  ORM model representing the `songs` table.
Why:   Maps Python objects to database rows; Alembic reads it for migrations.
Who:   Used by SqlSongRepository for CRUD and by the in-memory test fake.

Table Design:
    - Integer surrogate key assigned by the database on insert
    - group_name / song_name: the catalog's natural lookup pair, NOT unique
      (the same band may publish two recordings with the same title)
    - release_date: free-form string, no calendar validation
    - text: full lyrics, verses separated by newlines
    - link: external URL, stored as given

    Index on (group_name, song_name) backs GET /info, PATCH and DELETE,
    which all resolve a song by that pair.
"""

from sqlalchemy import Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from songcatalog.database import Base


class Song(Base):
    """
    A catalog entry.

    Lifecycle:
        1. Created by POST /songs
        2. One field at a time changed by PATCH /songs
        3. Removed by DELETE /songs (hard delete, no history)
    """

    __tablename__ = "songs"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
        comment="Surrogate key assigned by the database",
    )

    group_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Performing group or artist",
    )

    song_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Song title",
    )

    release_date: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        default="",
        comment="Release date as supplied by the client",
    )

    text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Lyrics, verses separated by newlines",
    )

    link: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        default="",
        comment="External link (e.g. a video URL)",
    )

    __table_args__ = (
        Index("idx_songs_group_song", group_name, song_name),
    )

    def __repr__(self) -> str:
        return (
            f"<Song(id={self.id}, group='{self.group_name}', "
            f"song='{self.song_name}')>"
        )
