from dishka import AsyncContainer, make_async_container

from pds.config import Config
from pds.domain.deposit.util.di.provider import DepositProvider
from pds.infrastructure.http.di import HttpProvider
from pds.infrastructure.memory.di import MemoryStoreProvider
from pds.infrastructure.persistence.di import PersistenceProvider
from pds.infrastructure.scheduler.di import SchedulerProvider
from pds.util.di.base import Provider
from pds.util.di.scope import Scope


def create_container(config: Config | None = None, *extra: Provider) -> AsyncContainer:
    """Build the application container.

    ``extra`` providers are added last so deployments can register
    transports or replace adapters.
    """
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    store_provider = (
        MemoryStoreProvider() if config.store.backend == "memory" else PersistenceProvider()
    )

    return make_async_container(
        store_provider,
        HttpProvider(),
        DepositProvider(),
        SchedulerProvider(),
        *extra,
        context={Config: config},
        scopes=Scope,  # type: ignore[arg-type]  # Custom scope class
    )
