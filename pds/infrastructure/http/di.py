"""DI provider for HTTP infrastructure."""

from collections.abc import AsyncIterable
from typing import NewType

import httpx
from dishka import provide

from pds.domain.deposit.port.status_document import StatusDocumentFetcher
from pds.infrastructure.http.status_document import HttpStatusDocumentFetcher
from pds.util.di.base import Provider
from pds.util.di.scope import Scope

StatusHttpClient = NewType("StatusHttpClient", httpx.AsyncClient)

# Per-repository timeouts override this on each request
_DEFAULT_TIMEOUT = httpx.Timeout(connect=5.0, read=30.0, write=5.0, pool=5.0)


class HttpProvider(Provider):
    """DI provider for HTTP fetcher adapters."""

    @provide(scope=Scope.APP)
    async def get_status_http_client(self) -> AsyncIterable[StatusHttpClient]:
        """Shared HTTP client for fetching repository status documents."""
        async with httpx.AsyncClient(timeout=_DEFAULT_TIMEOUT) as client:
            yield StatusHttpClient(client)

    @provide(scope=Scope.APP, provides=StatusDocumentFetcher)
    def get_status_document_fetcher(self, client: StatusHttpClient) -> HttpStatusDocumentFetcher:
        return HttpStatusDocumentFetcher(client=client)
