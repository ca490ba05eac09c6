"""
Schema migrations on startup.

Runs `alembic upgrade head` programmatically so a fresh database is usable as
soon as the service boots. alembic/env.py drives an async engine with
asyncio.run(), so this must be called from a thread that has no running
event loop (the lifespan handler uses asyncio.to_thread).
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

logger = logging.getLogger(__name__)


def run_migrations(alembic_ini: str, revision: str = "head") -> bool:
    """
    Upgrade the database to `revision`.

    Returns False (and logs a warning) when the Alembic config file is not
    present, e.g. when the package was installed without its source tree.
    Migration failures propagate to the caller.
    """
    ini_path = Path(alembic_ini)
    if not ini_path.is_file():
        logger.warning("Alembic config not found at %s; skipping migrations", ini_path)
        return False

    cfg = Config(str(ini_path))
    # Keep the application's logging configuration intact
    cfg.attributes["configure_logger"] = False

    logger.info("Applying migrations up to %s", revision)
    command.upgrade(cfg, revision)
    logger.info("Migrations applied")
    return True
