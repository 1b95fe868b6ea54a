"""Database engine and session factory creation."""

from pathlib import Path
from typing import Any

from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from pds.config import DatabaseConfig

# Seconds a SQLite connection waits on another connection's write lock
SQLITE_BUSY_TIMEOUT = 30.0


def _is_sqlite_memory(url: URL) -> bool:
    return url.database in (None, "", ":memory:") or (url.database or "").startswith(
        "file::memory:"
    )


def _resolve_sqlite_file(url: URL) -> URL:
    """Expand ~ in the database path and create its directory."""
    path = Path(url.database or "").expanduser().absolute()
    path.parent.mkdir(parents=True, exist_ok=True)
    return url.set(database=str(path))


def _sqlite_engine_kwargs(url: URL) -> dict[str, Any]:
    if _is_sqlite_memory(url):
        # Every connection to :memory: opens a new empty database, so all
        # sessions must share the single one.
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    # File databases get one connection per session; concurrent writers wait
    # on SQLite's lock instead of sharing a transaction.
    return {"connect_args": {"timeout": SQLITE_BUSY_TIMEOUT}}


def create_db_engine(config: DatabaseConfig) -> AsyncEngine:
    url = make_url(config.url)

    if url.get_backend_name() == "sqlite":
        if not _is_sqlite_memory(url):
            url = _resolve_sqlite_file(url)
        engine_kwargs = _sqlite_engine_kwargs(url)
    else:
        engine_kwargs = {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}

    return create_async_engine(url, echo=config.echo, **engine_kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
