"""
SongCatalog Backend: Song Service
==================================

What:  Domain layer between the HTTP routes and the song repository.
Why:   Keeps the lyric/verse rules out of the routes and out of SQL.
How:   Mostly forwards to the injected SongRepository. The only logic of its
       own is splitting lyrics into verses and slicing a page of them.

Design Decision:
    SongService receives its repository and logger at construction time.
    Routes build one per request around the request's database session, and
    tests build one around an in-memory fake.
"""

import logging
import math
from typing import List, Optional, Tuple

from songcatalog.exceptions import ValidationError
from songcatalog.models.song import Song
from songcatalog.repositories.base import SongRepository
from songcatalog.schemas.song import Pagination, SongCreate, SongFilter, SongUpdate

VERSE_SEPARATOR = "\n"


def split_verses(text: str) -> List[str]:
    """
    Split lyrics into verses at every newline.

    No trimming and no removal of blank lines: "a\\n\\nb" gives
    ["a", "", "b"], and an empty text gives [""].
    """
    return text.split(VERSE_SEPARATOR)


def paginate_verses(verses: List[str], page: int, limit: int) -> List[str]:
    """
    Return verses[start:end] with start=(page-1)*limit and end=start+limit,
    both clamped to [0, len(verses)].

    A page past the end yields an empty list rather than an error.
    """
    total = len(verses)
    start = min(max((page - 1) * limit, 0), total)
    end = min(max(start + limit, 0), total)
    return verses[start:end]


def total_pages(total_items: int, limit: int) -> int:
    """ceil(total_items / limit)."""
    return math.ceil(total_items / limit) if total_items else 0


class SongService:
    """Song catalog operations exposed to the HTTP layer."""

    def __init__(self, repository: SongRepository, logger: Optional[logging.Logger] = None):
        self.repository = repository
        self.logger = logger or logging.getLogger(__name__)

    async def create_song(self, data: SongCreate) -> Song:
        return await self.repository.create_song(data)

    async def get_song(self, song_id: int) -> Song:
        return await self.repository.get_by_id(song_id)

    async def get_by_group_and_song_name(self, group: str, song: str) -> Song:
        return await self.repository.get_by_group_and_song_name(group, song)

    async def list_songs(
        self, song_filter: SongFilter, pagination: Pagination
    ) -> Tuple[List[Song], int]:
        return await self.repository.list_filtered(song_filter, pagination)

    async def update_field(self, changes: SongUpdate, song: Song) -> Song:
        return await self.repository.update_field(changes, song)

    async def delete(self, song_id: int) -> None:
        await self.repository.delete(song_id)

    async def get_text(self, song_id: int) -> List[str]:
        """All verses of a song, in order. Raises NotFoundError if absent."""
        song = await self.repository.get_by_id(song_id)
        return split_verses(song.text)

    async def get_text_page(self, song_id: int, page: int, limit: int) -> Tuple[str, List[str]]:
        """
        The song title and one page of its verses.

        Uses a single lookup for both the title and the lyrics. Page and
        limit are checked before the lookup.
        """
        if page < 1:
            raise ValidationError("page must be at least 1", field="page", context={"page": page})
        if limit < 1:
            raise ValidationError("limit must be at least 1", field="limit", context={"limit": limit})

        song = await self.repository.get_by_id(song_id)
        verses = split_verses(song.text)
        page_verses = paginate_verses(verses, page, limit)
        self.logger.debug(
            "Song %d: %d verse(s), returning %d for page=%d limit=%d",
            song_id, len(verses), len(page_verses), page, limit,
        )
        return song.song_name, page_verses
