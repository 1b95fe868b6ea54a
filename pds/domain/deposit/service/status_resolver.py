import logging

import logfire

from pds.config import RepositoryConfig
from pds.domain.deposit.model.value import DepositStatus
from pds.domain.deposit.port.status_document import StatusDocumentFetcher
from pds.domain.deposit.util.atom import StatementParseError, parse_sword_state
from pds.domain.shared.error import ExternalServiceError, StatusResolutionError
from pds.domain.shared.service import Service

logger = logging.getLogger(__name__)


class AtomStatementResolver(Service):
    """Resolves a deposit's remote status from its SWORDv2 Atom statement."""

    fetcher: StatusDocumentFetcher

    async def resolve(
        self, status_ref: str | None, repository: RepositoryConfig
    ) -> DepositStatus | None:
        """Map the remote state of a deposit onto a DepositStatus.

        Returns ``None`` when the statement carries no state or a state that
        ``repository.status_mapping`` does not know.

        Raises:
            ValueError: If ``status_ref`` is empty.
            StatusResolutionError: If the statement cannot be fetched or parsed.
        """
        if status_ref is None or not status_ref.strip():
            raise ValueError("Deposit status reference must not be empty")

        with logfire.span("ResolveDepositStatus", reference=status_ref, repository=repository.key):
            try:
                document = await self.fetcher.fetch_document(status_ref, repository)
                term = parse_sword_state(document)
            except (ExternalServiceError, StatementParseError) as e:
                raise StatusResolutionError(
                    f"Error resolving deposit status URI from SWORD statement <{status_ref}>: {e}",
                    reference=status_ref,
                ) from e

            if term is None:
                return None

            status = repository.status_mapping.get(term)
            if status is None:
                logger.warning(
                    "Unmapped SWORD state %s in statement <%s> (repository %s)",
                    term,
                    status_ref,
                    repository.key,
                )
            return status
