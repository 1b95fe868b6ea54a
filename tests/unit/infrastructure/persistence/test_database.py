"""Tests for engine creation and SQLite pooling."""

import asyncio
from pathlib import Path

import pytest
from sqlalchemy.pool import StaticPool

from pds.config import DatabaseConfig
from pds.domain.deposit.model.aggregate import Deposit
from pds.domain.deposit.model.value import DepositStatus
from pds.domain.shared.error import ConflictError
from pds.infrastructure.persistence.database import create_db_engine, create_session_factory
from pds.infrastructure.persistence.repository.entity_store import SqlEntityStore
from pds.infrastructure.persistence.tables import metadata


class TestCreateDbEngine:
    @pytest.mark.asyncio
    async def test_memory_database_shares_one_connection(self):
        engine = create_db_engine(DatabaseConfig(url="sqlite+aiosqlite:///:memory:"))
        try:
            assert isinstance(engine.pool, StaticPool)
        finally:
            await engine.dispose()

    @pytest.mark.asyncio
    async def test_file_database_uses_a_connection_per_session(self, tmp_path: Path):
        engine = create_db_engine(
            DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path}/nested/pds.db")
        )
        try:
            assert not isinstance(engine.pool, StaticPool)
            assert engine.url.database == str(tmp_path / "nested" / "pds.db")
            assert (tmp_path / "nested").is_dir()
        finally:
            await engine.dispose()

    @pytest.mark.asyncio
    async def test_failed_create_does_not_roll_back_concurrent_write(self, tmp_path: Path):
        engine = create_db_engine(DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path}/pds.db"))
        async with engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
        store = SqlEntityStore(create_session_factory(engine))
        await store.create(Deposit(id="d1", submission="s1"))

        try:
            results = await asyncio.gather(
                store.create(Deposit(id="d1", submission="s1")),
                store.create(Deposit(id="d2", deposit_status=DepositStatus.SUBMITTED, submission="s1")),
                return_exceptions=True,
            )

            assert isinstance(results[0], ConflictError)
            stored = await store.get("d2", Deposit)
            assert stored.deposit_status == DepositStatus.SUBMITTED
        finally:
            await engine.dispose()
