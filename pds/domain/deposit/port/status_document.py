from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from pds.config import RepositoryConfig
from pds.domain.shared.port import Port


class StatusDocumentFetcher(Port, Protocol):
    """Retrieves the raw status document a repository publishes for a deposit."""

    @abstractmethod
    async def fetch_document(self, reference: str, repository: RepositoryConfig) -> bytes:
        """Fetch the document at ``reference``.

        Raises ExternalServiceError (including on timeout).
        """
        ...
