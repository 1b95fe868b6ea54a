from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy import ColumnElement, insert, or_, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pds.domain.shared.error import (
    ConflictError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from pds.domain.shared.model.entity import E, EntityId
from pds.domain.shared.port.entity_store import EntityFilter, EntityStore
from pds.infrastructure.persistence.mappers.entity import (
    entity_to_dict,
    row_to_entity,
    table_for,
    to_column_value,
)

logger = logging.getLogger(__name__)

_COLLECTIONS = (list, tuple, set, frozenset)


class SqlEntityStore(EntityStore):
    """SQLAlchemy implementation of EntityStore.

    Each call runs in its own short transaction, so nothing is held open
    across the await points of a critical interaction. Updates compare and
    bump the ``version`` column in a single statement.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory.begin() as session:
                yield session
        except IntegrityError:
            raise
        except DBAPIError as e:
            raise StorageUnavailableError(f"Entity store unavailable: {e}") from e

    async def get(self, entity_id: EntityId, entity_type: type[E]) -> E:
        table = table_for(entity_type)
        async with self._transaction() as session:
            result = await session.execute(select(table).where(table.c.id == entity_id))
            row = result.mappings().first()
        if row is None:
            raise NotFoundError(f"{entity_type.__name__} {entity_id} not found")
        return row_to_entity(entity_type, row)

    async def query(self, entity_type: type[E], filter: EntityFilter) -> list[E]:
        table = table_for(entity_type)
        stmt = select(table).order_by(table.c.id)
        for field, value in filter.items():
            if field not in table.c:
                raise ValidationError(
                    f"{entity_type.__name__} cannot be filtered by {field}", field=field
                )
            stmt = stmt.where(self._condition(table.c[field], value))

        async with self._transaction() as session:
            result = await session.execute(stmt)
            rows = result.mappings().all()
        return [row_to_entity(entity_type, r) for r in rows]

    @staticmethod
    def _condition(column: Any, value: Any) -> ColumnElement[bool]:
        if isinstance(value, _COLLECTIONS):
            values = [to_column_value(v) for v in value if v is not None]
            clause = column.in_(values)
            if any(v is None for v in value):
                clause = or_(clause, column.is_(None))
            return clause
        if value is None:
            return column.is_(None)
        return column == to_column_value(value)

    async def create(self, entity: E) -> E:
        table = table_for(type(entity))
        values = entity_to_dict(entity)
        values["version"] = 1
        try:
            async with self._transaction() as session:
                await session.execute(insert(table).values(**values))
        except IntegrityError as e:
            raise ConflictError(
                f"{type(entity).__name__} {entity.id} already exists", entity_id=entity.id
            ) from e
        return entity.model_copy(update={"version": 1})

    async def update(self, entity: E) -> E:
        entity_type = type(entity)
        if entity.version is None:
            raise ConflictError(
                f"{entity_type.__name__} {entity.id} has no version; read it before updating",
                entity_id=entity.id,
            )

        table = table_for(entity_type)
        values = entity_to_dict(entity)
        values.pop("id")
        values["version"] = entity.version + 1

        async with self._transaction() as session:
            result = await session.execute(
                update(table)
                .where(table.c.id == entity.id, table.c.version == entity.version)
                .values(**values)
            )
            if result.rowcount == 0:
                exists = await session.execute(select(table.c.version).where(table.c.id == entity.id))
                current = exists.scalar_one_or_none()
                if current is None:
                    raise NotFoundError(f"{entity_type.__name__} {entity.id} not found")
                raise ConflictError(
                    f"{entity_type.__name__} {entity.id} is at version {current}, "
                    f"update was based on version {entity.version}",
                    entity_id=entity.id,
                )

        logger.debug("Updated %s %s to version %s", entity_type.__name__, entity.id, entity.version + 1)
        return entity.model_copy(update={"version": entity.version + 1})
