"""
SongCatalog Backend: Pydantic Request/Response Schemas
=======================================================

What:  Pydantic models defining the API contract.
Why:   Input validation, serialization, and OpenAPI doc generation.

Wire naming:
    Bodies use `group`, `song`, `releaseDate`, `text`, `link`. Query strings
    use snake_case (`release_date`, `song_name`). `release_date` is also
    accepted in request bodies.

Schemas are separate from the SQLAlchemy model: the table says `group_name`
and `song_name`, the API says `group` and `song`.
"""

from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field

from songcatalog.models.song import Song

_RELEASE_DATE_INPUT = AliasChoices("releaseDate", "release_date")


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class SongCreate(BaseModel):
    """Body of POST /songs. Every attribute is required and non-empty."""

    group: str = Field(min_length=1, max_length=255, description="Group or artist name")
    song: str = Field(min_length=1, max_length=255, description="Song title")
    release_date: str = Field(
        min_length=1,
        max_length=64,
        validation_alias=_RELEASE_DATE_INPUT,
        serialization_alias="releaseDate",
        description="Release date (free-form, e.g. 16.07.2006)",
    )
    text: str = Field(min_length=1, description="Lyrics; verses separated by newlines")
    link: str = Field(min_length=1, max_length=1024, description="External link")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "group": "Muse",
                    "song": "Supermassive Black Hole",
                    "releaseDate": "16.07.2006",
                    "text": "Ooh baby, don't you know I suffer?\nOoh baby, can you hear me moan?",
                    "link": "https://www.youtube.com/watch?v=Xsp3_a-PMTw",
                }
            ]
        }
    }


class SongUpdate(BaseModel):
    """
    Body of PATCH /songs.

    Any subset may be sent, but only the first populated field in the order
    group, song, releaseDate, text, link is applied.
    """

    group: Optional[str] = Field(default=None, max_length=255)
    song: Optional[str] = Field(default=None, max_length=255)
    release_date: Optional[str] = Field(
        default=None,
        max_length=64,
        validation_alias=_RELEASE_DATE_INPUT,
        serialization_alias="releaseDate",
    )
    text: Optional[str] = None
    link: Optional[str] = Field(default=None, max_length=1024)


class SongFilter(BaseModel):
    """
    Optional predicates for GET /songs.

    group, song, release_date and link match exactly; text matches as a
    case-insensitive substring. None or empty string means "no constraint".
    """

    group: Optional[str] = None
    song: Optional[str] = None
    release_date: Optional[str] = None
    text: Optional[str] = None
    link: Optional[str] = None


class Pagination(BaseModel):
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class SongResponse(BaseModel):
    """Full song record."""

    id: int = Field(description="Song identifier")
    group: str
    song: str
    release_date: str = Field(serialization_alias="releaseDate")
    text: str
    link: str

    @classmethod
    def from_model(cls, song: Song) -> "SongResponse":
        return cls(
            id=song.id,
            group=song.group_name,
            song=song.song_name,
            release_date=song.release_date,
            text=song.text,
            link=song.link,
        )


class SongInfoResponse(BaseModel):
    """Returned by GET /info: the record without its identifier."""

    song: str
    group: str
    release_date: str = Field(serialization_alias="releaseDate")
    text: str
    link: str

    @classmethod
    def from_model(cls, song: Song) -> "SongInfoResponse":
        return cls(
            song=song.song_name,
            group=song.group_name,
            release_date=song.release_date,
            text=song.text,
            link=song.link,
        )


class SongListResponse(BaseModel):
    """
    Offset-paginated listing.

    total_pages = ceil(total_items / limit); a page past the end returns an
    empty `data` list with the same totals.
    """

    data: List[SongResponse] = Field(description="Songs on this page")
    page: int = Field(description="Requested page number (1-based)")
    total_pages: int = Field(description="Number of pages at the requested limit")
    total_items: int = Field(description="Songs matching the filter across all pages")


class SongTextResponse(BaseModel):
    """One page of verses from GET /songs/{id}/text."""

    song: str = Field(description="Song title")
    verses: List[str] = Field(description="Verses on the requested page")


class DeleteResponse(BaseModel):
    message: str = Field(default="song deleted")
    song: str = Field(description="Title of the deleted song")
    id: int = Field(description="Identifier of the deleted song")


class ErrorResponse(BaseModel):
    """Error body shared by every 4xx/5xx response."""

    error: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="healthy or unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
