"""HTTP adapter for StatusDocumentFetcher port."""

import logging

import httpx

from pds.config import RepositoryConfig
from pds.domain.deposit.port.status_document import StatusDocumentFetcher
from pds.domain.shared.error import ExternalServiceError

logger = logging.getLogger(__name__)

ATOM_ACCEPT = "application/atom+xml, application/xml;q=0.9, */*;q=0.5"


def rewrite_reference(reference: str, repository: RepositoryConfig) -> str:
    """Swap the configured statement URI prefix, if the reference carries it."""
    prefix = repository.statement_uri_prefix
    replacement = repository.statement_uri_replacement
    if prefix and replacement is not None and reference.startswith(prefix):
        return replacement + reference[len(prefix) :]
    return reference


class HttpStatusDocumentFetcher(StatusDocumentFetcher):
    """Fetches status documents (SWORD statements) over HTTP using httpx."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def fetch_document(self, reference: str, repository: RepositoryConfig) -> bytes:
        url = rewrite_reference(reference, repository)
        auth = (
            httpx.BasicAuth(repository.auth.username, repository.auth.password)
            if repository.auth
            else None
        )
        try:
            response = await self._client.get(
                url,
                auth=auth,
                timeout=httpx.Timeout(repository.timeout),
                headers={"Accept": ATOM_ACCEPT},
                follow_redirects=True,
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise ExternalServiceError(
                f"Timed out after {repository.timeout}s fetching {url}"
            ) from e
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(
                f"{url} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Unable to fetch {url}: {e}") from e

        logger.debug("Fetched status document %s (%d bytes)", url, len(response.content))
        return response.content
