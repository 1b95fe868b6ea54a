import logging

from pds.domain.critical.model.result import CriticalResult
from pds.domain.critical.service.interaction import CriticalInteraction
from pds.domain.deposit.model.aggregate import Deposit, Repository, RepositoryCopy
from pds.domain.deposit.model.registry import RepositoryConfigRegistry
from pds.domain.deposit.model.status import DEPOSIT_STATUS
from pds.domain.deposit.model.value import CopyStatus, DepositStatus
from pds.domain.deposit.service.status_resolver import AtomStatementResolver
from pds.domain.shared.error import ConflictError, DepositServiceError, RemedialDepositError
from pds.domain.shared.model.entity import EntityId
from pds.domain.shared.port.entity_store import EntityStore
from pds.domain.shared.service import Service

logger = logging.getLogger(__name__)

# Deposit status -> status of the repository's copy
_COPY_STATUS = {
    DepositStatus.ACCEPTED: CopyStatus.COMPLETE,
    DepositStatus.REJECTED: CopyStatus.REJECTED,
}


def _is_eligible(deposit: Deposit) -> bool:
    return (
        DEPOSIT_STATUS.is_intermediate(deposit.deposit_status)
        and bool(deposit.deposit_status_ref)
        and deposit.repository is not None
    )


def _is_consistent(deposit: Deposit, resolved: DepositStatus | None) -> bool:
    if DEPOSIT_STATUS.is_terminal(resolved):
        return deposit.deposit_status == resolved
    return DEPOSIT_STATUS.is_intermediate(deposit.deposit_status)


class DepositStatusService(Service):
    """Moves deposits to their terminal status once the repository decides."""

    store: EntityStore
    critical: CriticalInteraction
    resolver: AtomStatementResolver
    repositories: RepositoryConfigRegistry

    async def process_deposit_status(
        self, deposit_id: EntityId
    ) -> CriticalResult[DepositStatus | None, Deposit]:
        """Resolve the remote status of a deposit and record a terminal outcome.

        Only ACCEPTED and REJECTED are applied; any other resolved status leaves
        the deposit as it is. Precondition misses and version conflicts are
        returned as unsuccessful results. A deposit whose repository has no
        configuration is logged and returned.

        Raises:
            DepositServiceError: If the status could not be resolved or applied.
        """
        result = await self.critical.perform_critical(
            deposit_id,
            Deposit,
            _is_eligible,
            _is_consistent,
            self._resolve_and_apply,
        )

        if result.success or result.error is None:
            return result

        if isinstance(result.error, RemedialDepositError):
            logger.error("Deposit %s needs attention: %s", deposit_id, result.error.message)
            return result

        if isinstance(result.error, ConflictError):
            return result

        raise DepositServiceError(
            f"Failed to update deposit status for deposit {deposit_id}: {result.error}",
            deposit_id=deposit_id,
        ) from result.error

    async def _resolve_and_apply(self, deposit: Deposit) -> DepositStatus | None:
        # Precondition guarantees a repository
        repository = await self.store.get(deposit.repository, Repository)  # type: ignore[arg-type]
        config = self.repositories.get(repository.repository_key)
        if config is None:
            raise RemedialDepositError(
                f"No configuration for repository {repository.name} "
                f"(key {repository.repository_key!r})",
                deposit_id=deposit.id,
            )

        status = await self.resolver.resolve(deposit.deposit_status_ref, config)
        if status is None:
            raise DepositServiceError(
                f"Failed to map remote status <{deposit.deposit_status_ref}> to a deposit status",
                deposit_id=deposit.id,
            )

        if status not in _COPY_STATUS:
            logger.debug("Deposit %s still %s remotely", deposit.id, status)
            return status

        if deposit.repository_copy is not None:
            copy = await self.store.get(deposit.repository_copy, RepositoryCopy)
            copy.copy_status = _COPY_STATUS[status]
            await self.store.update(copy)

        logger.info("Deposit %s %s -> %s", deposit.id, deposit.deposit_status, status)
        deposit.deposit_status = status
        return status
