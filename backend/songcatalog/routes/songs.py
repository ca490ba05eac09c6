"""
SongCatalog Backend: Song Route Handlers
=========================================

What:  The catalog's HTTP surface.
How:   Binds query strings and JSON bodies, delegates to SongService, shapes
       the response. Errors are raised as exceptions and turned into JSON by
       the global handlers in main.py.

Route Inventory:
    POST   /songs                 create a song
    GET    /songs                 filtered, paginated listing
    GET    /songs/{id}            one song by id
    GET    /songs/{id}/text       one page of a song's verses
    PATCH  /songs?group&song_name partial update (first populated field only)
    DELETE /songs?group&song_name delete the song found by group + title
    GET    /info?group&song       one song by group + title

Validation:
    Query/path/body constraints are declared on the parameters, so FastAPI
    rejects bad input (mapped to 400 in main.py) before the service, and
    therefore the database, is ever touched.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from songcatalog.config import settings
from songcatalog.database import get_db_session
from songcatalog.repositories import SqlSongRepository
from songcatalog.schemas.song import (
    DeleteResponse,
    ErrorResponse,
    Pagination,
    SongCreate,
    SongFilter,
    SongInfoResponse,
    SongListResponse,
    SongResponse,
    SongTextResponse,
    SongUpdate,
)
from songcatalog.services.song_service import SongService, total_pages

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Songs"])

_ERRORS_400 = {400: {"description": "Invalid input", "model": ErrorResponse}}
_ERRORS_404 = {404: {"description": "Song not found", "model": ErrorResponse}}
_ERRORS_500 = {500: {"description": "Storage failure", "model": ErrorResponse}}


def get_song_service(db: AsyncSession = Depends(get_db_session)) -> SongService:
    """Build the request's service around its database session."""
    repository = SqlSongRepository(db, logger=logging.getLogger("songcatalog.repository"))
    return SongService(repository, logger=logging.getLogger("songcatalog.service"))


@router.post(
    "/songs",
    response_model=SongResponse,
    responses={**_ERRORS_400, **_ERRORS_500},
    summary="Add a song",
    description="Creates a catalog entry from a JSON body. All five fields are required.",
)
async def create_song(
    data: SongCreate,
    service: SongService = Depends(get_song_service),
) -> SongResponse:
    song = await service.create_song(data)
    return SongResponse.from_model(song)


@router.get(
    "/songs",
    response_model=SongListResponse,
    responses={**_ERRORS_400, **_ERRORS_500},
    summary="List songs with filters and pagination",
    description=(
        "group, song, release_date and link match exactly; text matches any "
        "part of the lyrics, ignoring case. Omitted or empty filters are ignored."
    ),
)
async def list_songs(
    group: Optional[str] = Query(default=None, description="Exact group name"),
    song: Optional[str] = Query(default=None, description="Exact song title"),
    release_date: Optional[str] = Query(default=None, description="Exact release date"),
    text: Optional[str] = Query(default=None, description="Substring of the lyrics"),
    link: Optional[str] = Query(default=None, description="Exact link"),
    page: int = Query(default=1, ge=1, description="Page number, starting at 1"),
    limit: int = Query(
        default=settings.default_page_limit, ge=1, le=100, description="Songs per page (max 100)"
    ),
    service: SongService = Depends(get_song_service),
) -> SongListResponse:
    song_filter = SongFilter(
        group=group, song=song, release_date=release_date, text=text, link=link
    )
    pagination = Pagination(page=page, limit=limit)

    songs, total_items = await service.list_songs(song_filter, pagination)

    return SongListResponse(
        data=[SongResponse.from_model(s) for s in songs],
        page=page,
        total_pages=total_pages(total_items, limit),
        total_items=total_items,
    )


@router.get(
    "/songs/{song_id}",
    response_model=SongResponse,
    responses={**_ERRORS_400, **_ERRORS_404, **_ERRORS_500},
    summary="Get a song by id",
)
async def get_song(
    song_id: int = Path(description="Song identifier"),
    service: SongService = Depends(get_song_service),
) -> SongResponse:
    song = await service.get_song(song_id)
    return SongResponse.from_model(song)


@router.get(
    "/songs/{song_id}/text",
    response_model=SongTextResponse,
    responses={**_ERRORS_400, **_ERRORS_404, **_ERRORS_500},
    summary="Get song lyrics paginated by verse",
    description=(
        "Lyrics are split into verses at newlines. A page past the last verse "
        "returns an empty list."
    ),
)
async def get_song_text(
    song_id: int = Path(description="Song identifier"),
    page: int = Query(default=1, ge=1, description="Page number, starting at 1"),
    limit: int = Query(
        default=settings.default_verse_limit, ge=1, le=100, description="Verses per page"
    ),
    service: SongService = Depends(get_song_service),
) -> SongTextResponse:
    title, verses = await service.get_text_page(song_id, page, limit)
    return SongTextResponse(song=title, verses=verses)


@router.patch(
    "/songs",
    response_model=SongResponse,
    responses={**_ERRORS_400, **_ERRORS_404, **_ERRORS_500},
    summary="Change one field of a song",
    description=(
        "Finds the song by group and title, then applies the first populated "
        "body field in the order group, song, releaseDate, text, link. Any "
        "further fields in the body are ignored."
    ),
)
async def update_song(
    changes: SongUpdate,
    group: str = Query(min_length=1, description="Group of the song to change"),
    song_name: str = Query(min_length=1, description="Title of the song to change"),
    service: SongService = Depends(get_song_service),
) -> SongResponse:
    song = await service.get_by_group_and_song_name(group, song_name)
    updated = await service.update_field(changes, song)
    return SongResponse.from_model(updated)


@router.delete(
    "/songs",
    response_model=DeleteResponse,
    responses={**_ERRORS_400, **_ERRORS_404, **_ERRORS_500},
    summary="Delete a song by group and title",
)
async def delete_song(
    group: str = Query(min_length=1, description="Group of the song to delete"),
    song_name: str = Query(min_length=1, description="Title of the song to delete"),
    service: SongService = Depends(get_song_service),
) -> DeleteResponse:
    song = await service.get_by_group_and_song_name(group, song_name)
    await service.delete(song.id)
    return DeleteResponse(message="song deleted", song=song.song_name, id=song.id)


@router.get(
    "/info",
    response_model=SongInfoResponse,
    responses={**_ERRORS_400, **_ERRORS_404, **_ERRORS_500},
    summary="Get song details by group and title",
)
async def get_song_info(
    group: str = Query(min_length=1, description="Group name"),
    song: str = Query(min_length=1, description="Song title"),
    service: SongService = Depends(get_song_service),
) -> SongInfoResponse:
    found = await service.get_by_group_and_song_name(group, song)
    return SongInfoResponse.from_model(found)
