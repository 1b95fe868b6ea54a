"""Database migration utilities.

Migrations run synchronously before the drivers start, keeping the
async/sync boundary clean.
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config as AlembicConfig

logger = logging.getLogger(__name__)

# Project root where alembic.ini lives
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent


def to_sync_url(database_url: str) -> str:
    """Convert async database URL to its sync equivalent for Alembic.

    - sqlite+aiosqlite:/// -> sqlite:///
    - postgresql+asyncpg:// -> postgresql://
    """
    url = database_url.replace("+aiosqlite", "").replace("+asyncpg", "")
    if "sqlite:///" in url:
        prefix, path = url.split("///", 1)
        if path.startswith("~"):
            url = f"{prefix}///{Path(path).expanduser()}"
    return url


def get_alembic_config(database_url: str) -> AlembicConfig:
    config = AlembicConfig(str(PROJECT_ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(PROJECT_ROOT / "migrations"))
    config.set_main_option("sqlalchemy.url", to_sync_url(database_url))
    # configure_logging() already ran; env.py must not replace its handlers
    config.attributes["configure_logger"] = False
    return config


def run_migrations(database_url: str, revision: str = "head") -> None:
    """Upgrade the database schema to ``revision``."""
    sync_url = to_sync_url(database_url)

    if "sqlite:///" in sync_url and ":memory:" not in sync_url:
        Path(sync_url.split("///")[-1]).parent.mkdir(parents=True, exist_ok=True)

    command.upgrade(get_alembic_config(database_url), revision)
    logger.info("Database migrations complete (%s)", revision)
