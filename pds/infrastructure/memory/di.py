from dishka import provide

from pds.domain.shared.port.entity_store import EntityStore
from pds.infrastructure.memory.entity_store import InMemoryEntityStore
from pds.util.di.base import Provider
from pds.util.di.scope import Scope


class MemoryStoreProvider(Provider):
    """Entity store kept in process memory (``store.backend: memory``)."""

    @provide(scope=Scope.APP)
    def get_entity_store(self) -> EntityStore:
        return InMemoryEntityStore()
