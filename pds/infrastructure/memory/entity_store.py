"""Process-local EntityStore with the same versioning rules as the SQL store."""

import logging
from enum import Enum
from typing import Any

from pds.domain.shared.error import ConflictError, NotFoundError, ValidationError
from pds.domain.shared.model.entity import E, Entity, EntityId
from pds.domain.shared.port.entity_store import EntityFilter, EntityStore

logger = logging.getLogger(__name__)

_COLLECTIONS = (list, tuple, set, frozenset)


def _normalize(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _matches(entity: Entity, field: str, expected: Any) -> bool:
    actual = _normalize(getattr(entity, field))
    if isinstance(expected, _COLLECTIONS):
        return actual in {_normalize(v) for v in expected}
    return actual == _normalize(expected)


class InMemoryEntityStore(EntityStore):
    """Keeps entities in a dict; callers always receive copies.

    No await happens between the version check and the write, so updates
    are atomic with respect to other coroutines on the same loop.
    """

    def __init__(self) -> None:
        self._entities: dict[tuple[type[Entity], EntityId], Entity] = {}

    async def get(self, entity_id: EntityId, entity_type: type[E]) -> E:
        stored = self._entities.get((entity_type, entity_id))
        if stored is None:
            raise NotFoundError(f"{entity_type.__name__} {entity_id} not found")
        return stored.model_copy(deep=True)  # type: ignore[return-value]

    async def query(self, entity_type: type[E], filter: EntityFilter) -> list[E]:
        for field in filter:
            if field not in entity_type.model_fields:
                raise ValidationError(
                    f"{entity_type.__name__} cannot be filtered by {field}", field=field
                )
        found = [
            entity
            for (kind, _), entity in sorted(self._entities.items(), key=lambda item: item[0][1])
            if kind is entity_type
            and all(_matches(entity, field, value) for field, value in filter.items())
        ]
        return [e.model_copy(deep=True) for e in found]  # type: ignore[misc]

    async def create(self, entity: E) -> E:
        key = (type(entity), entity.id)
        if key in self._entities:
            raise ConflictError(
                f"{type(entity).__name__} {entity.id} already exists", entity_id=entity.id
            )
        stored = entity.model_copy(deep=True, update={"version": 1})
        self._entities[key] = stored
        return stored.model_copy(deep=True)

    async def update(self, entity: E) -> E:
        entity_type = type(entity)
        stored = self._entities.get((entity_type, entity.id))
        if stored is None:
            raise NotFoundError(f"{entity_type.__name__} {entity.id} not found")
        if entity.version is None or stored.version != entity.version:
            raise ConflictError(
                f"{entity_type.__name__} {entity.id} is at version {stored.version}, "
                f"update was based on version {entity.version}",
                entity_id=entity.id,
            )
        updated = entity.model_copy(deep=True, update={"version": entity.version + 1})
        self._entities[(entity_type, entity.id)] = updated
        logger.debug("Updated %s %s to version %s", entity_type.__name__, entity.id, updated.version)
        return updated.model_copy(deep=True)
