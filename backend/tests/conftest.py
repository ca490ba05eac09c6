"""
SongCatalog Backend: Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── db_session:      AsyncSession on a private in-memory SQLite database
    ├── fake_repository: InMemorySongRepository (no database at all)
    ├── song_service:    SongService around the fake repository
    ├── test_client:     HTTPX AsyncClient with the service dependency overridden
    └── sample_song_data / sample_song_create: consistent test records
"""

import os

# Override settings for testing BEFORE any songcatalog imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["AUTO_MIGRATE"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from songcatalog.database import Base
from songcatalog.models.song import Song  # noqa: F401  (registers the table)
from songcatalog.schemas.song import SongCreate
from songcatalog.services.song_service import SongService

from tests.fakes import InMemorySongRepository


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_session():
    """
    Provides an AsyncSession bound to a fresh in-memory SQLite database.

    StaticPool keeps a single connection, so the schema created here is
    the one every statement in the test sees.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        yield session

    await engine.dispose()


# ══════════════════════════════════════════════════════════════════════════
# Service Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fake_repository():
    return InMemorySongRepository()


@pytest.fixture
def song_service(fake_repository):
    return SongService(fake_repository)


@pytest.fixture
def sample_song_data():
    """Request body for POST /songs, using the wire names."""
    return {
        "group": "Muse",
        "song": "Supermassive Black Hole",
        "releaseDate": "16.07.2006",
        "text": "Ooh baby, don't you know I suffer?\nOoh baby, can you hear me moan?\nYou caught me under false pretenses",
        "link": "https://www.youtube.com/watch?v=Xsp3_a-PMTw",
    }


@pytest.fixture
def sample_song_create(sample_song_data):
    return SongCreate.model_validate(sample_song_data)


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(song_service):
    """
    Provides an async HTTP test client wired to the in-memory service.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/songs")
            assert response.status_code == 200
    """
    from songcatalog.main import app
    from songcatalog.routes.songs import get_song_service

    app.dependency_overrides[get_song_service] = lambda: song_service
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
