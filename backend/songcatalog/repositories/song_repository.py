"""
SongCatalog Backend: SQL Song Repository
=========================================

What:  SongRepository implementation on an SQLAlchemy AsyncSession.
How:   Every operation issues parameterized statements built with the
       SQLAlchemy expression language; no string-formatted SQL.
Who:   Built per request by routes/songs.get_song_service().

Error translation:
    sqlalchemy.exc.SQLAlchemyError → StorageError(operation, cause)
    zero rows on a lookup          → NotFoundError
    id outside the INTEGER range   → NotFoundError (no query is sent)

Transactions:
    The repository never commits. The session dependency
    (database.get_db_session) commits once the request succeeds, so each
    operation here is a single statement inside the request's transaction.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import set_committed_value
from sqlalchemy.sql.elements import ColumnElement

from songcatalog.exceptions import NotFoundError, StorageError
from songcatalog.models.song import Song
from songcatalog.repositories.base import SongRepository, first_populated_field
from songcatalog.schemas.song import Pagination, SongCreate, SongFilter, SongUpdate

LIKE_ESCAPE = "\\"

# songs.id is a 32-bit INTEGER; no row can carry an id outside this range
MAX_SONG_ID = 2**31 - 1
# OFFSET is bound as a signed 64-bit integer by every supported driver
MAX_OFFSET = 2**63 - 1


def is_storable_id(song_id: int) -> bool:
    return 1 <= song_id <= MAX_SONG_ID


# Deterministic listing order; id breaks ties between identical rows
LIST_ORDER = (
    Song.group_name,
    Song.song_name,
    Song.release_date,
    Song.text,
    Song.link,
    Song.id,
)


def substring_pattern(value: str) -> str:
    """LIKE pattern matching `value` anywhere, with wildcards escaped."""
    escaped = (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def build_filter_conditions(song_filter: SongFilter) -> List[ColumnElement[bool]]:
    """
    Translate the non-empty fields of `song_filter` into WHERE conditions.

    Empty strings and None are skipped entirely, so an empty filter yields
    an empty list (no WHERE clause at all). The text field is matched as a
    case-insensitive substring; LIKE wildcards in the input are escaped and
    matched literally.
    """
    exact = (
        (song_filter.group, Song.group_name),
        (song_filter.song, Song.song_name),
        (song_filter.release_date, Song.release_date),
        (song_filter.link, Song.link),
    )
    conditions: List[ColumnElement[bool]] = [
        column == value for value, column in exact if value
    ]
    if song_filter.text:
        conditions.append(Song.text.ilike(substring_pattern(song_filter.text), escape=LIKE_ESCAPE))
    return conditions


class SqlSongRepository(SongRepository):
    """Song persistence backed by a relational database."""

    def __init__(self, session: AsyncSession, logger: Optional[logging.Logger] = None):
        self.session = session
        self.logger = logger or logging.getLogger(__name__)

    def _storage_error(self, operation: str, exc: SQLAlchemyError) -> StorageError:
        self.logger.error("%s failed: %s", operation, exc)
        return StorageError(operation=operation, cause=exc)

    async def create_song(self, data: SongCreate) -> Song:
        song = Song(
            group_name=data.group,
            song_name=data.song,
            release_date=data.release_date,
            text=data.text,
            link=data.link,
        )
        try:
            self.session.add(song)
            # Flush so the database assigns the id without committing
            await self.session.flush()
        except SQLAlchemyError as exc:
            raise self._storage_error("create_song", exc) from exc

        self.logger.info("Created song %d (%s - %s)", song.id, song.group_name, song.song_name)
        return song

    async def get_by_id(self, song_id: int) -> Song:
        if not is_storable_id(song_id):
            raise NotFoundError(resource="song", resource_id=str(song_id))

        try:
            result = await self.session.execute(select(Song).where(Song.id == song_id))
            song = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise self._storage_error("get_by_id", exc) from exc

        if song is None:
            raise NotFoundError(resource="song", resource_id=str(song_id))
        return song

    async def get_by_group_and_song_name(self, group: str, song: str) -> Song:
        stmt = (
            select(Song)
            .where(Song.group_name == group, Song.song_name == song)
            .order_by(Song.id)
            .limit(1)
        )
        try:
            result = await self.session.execute(stmt)
            found = result.scalars().first()
        except SQLAlchemyError as exc:
            raise self._storage_error("get_by_group_and_song_name", exc) from exc

        if found is None:
            raise NotFoundError(resource="song", resource_id=f"{group} - {song}")
        return found

    async def list_filtered(
        self, song_filter: SongFilter, pagination: Pagination
    ) -> Tuple[List[Song], int]:
        conditions = build_filter_conditions(song_filter)

        count_stmt = select(func.count()).select_from(Song)
        page_stmt = select(Song)
        if conditions:
            predicate = and_(*conditions)
            count_stmt = count_stmt.where(predicate)
            page_stmt = page_stmt.where(predicate)
        page_stmt = (
            page_stmt.order_by(*LIST_ORDER)
            .limit(pagination.limit)
            .offset(pagination.offset)
        )

        try:
            total = (await self.session.execute(count_stmt)).scalar_one()
            if pagination.offset > MAX_OFFSET:
                # No table can hold that many rows; the page is empty
                songs = []
            else:
                songs = list((await self.session.execute(page_stmt)).scalars().all())
        except SQLAlchemyError as exc:
            raise self._storage_error("list_filtered", exc) from exc

        self.logger.debug(
            "Listed %d of %d songs (page=%d, limit=%d, filters=%d)",
            len(songs), total, pagination.page, pagination.limit, len(conditions),
        )
        return songs, total

    async def update_field(self, changes: SongUpdate, song: Song) -> Song:
        field = first_populated_field(changes)
        values = {
            "group_name": song.group_name,
            "song_name": song.song_name,
            "release_date": song.release_date,
            "text": song.text,
            "link": song.link,
        }
        if field is not None:
            song_attr, value = field
            values[song_attr] = value

        # The instance is never made dirty, so this is the only UPDATE sent
        stmt = (
            update(Song)
            .where(Song.id == song.id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        try:
            await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise self._storage_error("update_field", exc) from exc

        if field is None:
            self.logger.info("Song %d: update carried no fields, record unchanged", song.id)
        else:
            set_committed_value(song, song_attr, value)
            self.logger.info("Song %d: updated %s", song.id, song_attr)
        return song

    async def delete(self, song_id: int) -> None:
        if not is_storable_id(song_id):
            self.logger.info("Delete of song %d skipped: id outside the stored range", song_id)
            return

        try:
            result = await self.session.execute(delete(Song).where(Song.id == song_id))
        except SQLAlchemyError as exc:
            raise self._storage_error("delete", exc) from exc

        self.logger.info("Deleted song %d (%d row(s) affected)", song_id, result.rowcount)
