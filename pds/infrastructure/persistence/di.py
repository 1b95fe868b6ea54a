from dishka import provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from pds.config import Config
from pds.domain.shared.port.entity_store import EntityStore
from pds.infrastructure.persistence.database import create_db_engine, create_session_factory
from pds.infrastructure.persistence.repository.entity_store import SqlEntityStore
from pds.util.di.base import Provider
from pds.util.di.scope import Scope


class PersistenceProvider(Provider):
    """SQL-backed entity store.

    The store opens a short transaction per call, so it is APP-scoped
    rather than bound to a UOW session.
    """

    @provide(scope=Scope.APP)
    def get_engine(self, config: Config) -> AsyncEngine:
        return create_db_engine(config.database)

    @provide(scope=Scope.APP)
    def get_session_factory(self, engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
        return create_session_factory(engine)

    @provide(scope=Scope.APP)
    def get_entity_store(self, session_factory: async_sessionmaker[AsyncSession]) -> EntityStore:
        return SqlEntityStore(session_factory)
