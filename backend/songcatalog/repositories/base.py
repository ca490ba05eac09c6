"""
SongCatalog Backend: Abstract Song Repository
==============================================

What:  Abstract base class defining the persistence contract for songs.
Why:   SongService depends on this interface only, so the SQL implementation
       can be swapped for an in-memory fake in tests.
How:   Concrete implementations inherit from SongRepository and implement
       every abstract method.

Contract shared by all implementations:
    - Lookups that match zero rows raise NotFoundError
    - Driver/connection failures raise StorageError
    - Pagination and filters arrive already validated
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from songcatalog.models.song import Song
from songcatalog.schemas.song import Pagination, SongCreate, SongFilter, SongUpdate

# Field priority for partial updates: (SongUpdate attribute, Song attribute)
UPDATE_PRIORITY: Tuple[Tuple[str, str], ...] = (
    ("group", "group_name"),
    ("song", "song_name"),
    ("release_date", "release_date"),
    ("text", "text"),
    ("link", "link"),
)


def first_populated_field(changes: SongUpdate) -> Optional[Tuple[str, str]]:
    """
    The (Song attribute, new value) pair that a partial update applies.

    Fields are checked in UPDATE_PRIORITY order; later populated fields are
    ignored. None when `changes` carries nothing.
    """
    for update_attr, song_attr in UPDATE_PRIORITY:
        value = getattr(changes, update_attr)
        if value:
            return song_attr, value
    return None


def apply_first_field(changes: SongUpdate, song: Song) -> Optional[str]:
    """Copy the first non-empty field of `changes` onto `song` and return its name."""
    field = first_populated_field(changes)
    if field is None:
        return None
    song_attr, value = field
    setattr(song, song_attr, value)
    return song_attr


class SongRepository(ABC):
    """
    Persistence operations for the song catalog.

    Implementations:
        - SqlSongRepository: SQLAlchemy async session (Postgres / SQLite)
        - InMemorySongRepository (tests/fakes.py): dict-backed fake
    """

    @abstractmethod
    async def create_song(self, data: SongCreate) -> Song:
        """Insert a song and return it with its store-assigned id."""
        ...

    @abstractmethod
    async def get_by_id(self, song_id: int) -> Song:
        """
        Fetch one song by identity.

        Raises:
            NotFoundError: no row has this id
            StorageError: the query failed
        """
        ...

    @abstractmethod
    async def get_by_group_and_song_name(self, group: str, song: str) -> Song:
        """
        Fetch one song by exact (group, song) match.

        Duplicates are allowed by the schema; the one with the lowest id is
        returned.

        Raises:
            NotFoundError: no row matches
            StorageError: the query failed
        """
        ...

    @abstractmethod
    async def list_filtered(
        self, song_filter: SongFilter, pagination: Pagination
    ) -> Tuple[List[Song], int]:
        """
        Return one page of matching songs and the total match count.

        Order: group, song, release date, text, link, then id.
        """
        ...

    @abstractmethod
    async def update_field(self, changes: SongUpdate, song: Song) -> Song:
        """
        Apply the first populated field of `changes` to `song` and persist
        the full record.
        """
        ...

    @abstractmethod
    async def delete(self, song_id: int) -> None:
        """Remove a song. Deleting a missing id is not an error."""
        ...
