from __future__ import annotations

from abc import abstractmethod
from typing import Any, Mapping, Protocol

from pds.domain.shared.model.entity import E, EntityId
from pds.domain.shared.port import Port

# A filter value that is a list/tuple/set/frozenset matches any of its members.
EntityFilter = Mapping[str, Any]


class EntityStore(Port, Protocol):
    """Optimistically versioned store of domain entities.

    There are no transactions or locks. ``update`` succeeds only when the
    entity's version still matches the stored version.
    """

    @abstractmethod
    async def get(self, entity_id: EntityId, entity_type: type[E]) -> E:
        """Fetch an entity by id. Raises NotFoundError."""
        ...

    @abstractmethod
    async def query(self, entity_type: type[E], filter: EntityFilter) -> list[E]: ...

    @abstractmethod
    async def create(self, entity: E) -> E: ...

    @abstractmethod
    async def update(self, entity: E) -> E:
        """Persist the entity, returning it with its new version.

        Raises ConflictError when the stored version differs from
        ``entity.version``, and NotFoundError when the entity does not exist.
        """
        ...
