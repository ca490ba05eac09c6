"""
Alembic Migration Environment
==============================

What:  Points Alembic at the catalog's metadata and database.
How:   The URL always comes from songcatalog.config.settings, never from
       alembic.ini. Online runs open one unpooled async connection and hand
       its sync facade to Alembic through run_sync().
Who:   The `alembic` CLI, and songcatalog.migrations.run_migrations() at
       application startup (which turns off the ini's logger setup).

SQLite:
    SQLite cannot ALTER most column properties in place, so batch mode
    (copy-and-move table rebuilds) is switched on for SQLite URLs.
"""

import asyncio
from logging.config import fileConfig
from typing import Any, Dict

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from songcatalog.config import settings
from songcatalog.database import Base
from songcatalog.models.song import Song  # noqa: F401  (registers the songs table)

alembic_cfg = context.config

if alembic_cfg.config_file_name and alembic_cfg.attributes.get("configure_logger", True):
    fileConfig(alembic_cfg.config_file_name, disable_existing_loggers=False)


def migration_options() -> Dict[str, Any]:
    """Options shared by offline and online runs."""
    return {
        "target_metadata": Base.metadata,
        "compare_type": True,
        "render_as_batch": settings.is_sqlite,
    }


def run_offline(url: str) -> None:
    """Write the migration SQL to stdout instead of executing it."""
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **migration_options(),
    )
    with context.begin_transaction():
        context.run_migrations()


def _migrate(connection: Connection) -> None:
    context.configure(connection=connection, **migration_options())
    with context.begin_transaction():
        context.run_migrations()


async def run_online(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_migrate)
    finally:
        await engine.dispose()


database_url = settings.sqlalchemy_url

if context.is_offline_mode():
    run_offline(database_url)
else:
    asyncio.run(run_online(database_url))
