"""
SongCatalog Backend: Database Session Management
=================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   Creates an async engine with connection pooling, provides a session
       dependency that commits on success and rolls back on error.
Who:   Used by route dependencies (routes/songs.py) and by Alembic.
When:  Engine is created at module import; sessions are created per request.

Connection Pooling:
    Postgres (asyncpg) gets a sized queue pool from settings. SQLite
    (aiosqlite, used in development and tests) manages its own connections,
    so the pool sizing arguments are not passed for it.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from songcatalog.config import Settings, settings


def engine_options(cfg: Settings) -> Dict[str, Any]:
    """Keyword arguments for create_async_engine() derived from settings."""
    options: Dict[str, Any] = {
        "pool_pre_ping": cfg.db_pool_pre_ping,
        # Echo SQL only when debugging; it is noisy otherwise
        "echo": cfg.log_level == "DEBUG",
    }
    if not cfg.is_sqlite:
        options.update(
            pool_size=cfg.db_pool_size,
            max_overflow=cfg.db_max_overflow,
            pool_recycle=cfg.db_pool_recycle,
            pool_timeout=cfg.db_pool_timeout,
        )
    return options


def build_engine(cfg: Settings) -> AsyncEngine:
    return create_async_engine(cfg.sqlalchemy_url, **engine_options(cfg))


# ── Engine Configuration ──────────────────────────────────────────────────
engine = build_engine(settings)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: records returned by the repository stay readable
# after the request's commit, when the response is serialized
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, which Alembic reads for
    --autogenerate.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route's dependencies (repository, service)
        3. On success: commits the transaction
        4. On error: rolls back the transaction
        5. Always: closes the session (returns connection to pool)

    The session connects lazily, so a request rejected by parameter
    validation never opens a database connection.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def dispose_engine() -> None:
    """Close all pooled connections; called during application shutdown."""
    await engine.dispose()
