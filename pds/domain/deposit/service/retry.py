import logging

from pds.domain.critical.model.result import CriticalResult
from pds.domain.critical.service.interaction import CriticalInteraction
from pds.domain.deposit.model.aggregate import Deposit, Repository, Submission
from pds.domain.deposit.model.registry import TransportRegistry
from pds.domain.deposit.model.value import DepositStatus
from pds.domain.shared.model.entity import EntityId
from pds.domain.shared.port.entity_store import EntityStore
from pds.domain.shared.service import Service

logger = logging.getLogger(__name__)


class FailedDepositRetryService(Service):
    """Re-attempts the transfer of deposits whose previous transfer failed."""

    store: EntityStore
    critical: CriticalInteraction
    transports: TransportRegistry

    async def retry(self, deposit_id: EntityId) -> CriticalResult[str | None, Deposit] | None:
        """Retry one FAILED deposit.

        Returns ``None`` when the deposit's repository has no transport.
        A failing transfer leaves the deposit FAILED and is reported through
        the returned result.
        """
        deposit = await self.store.get(deposit_id, Deposit)
        if deposit.repository is None:
            logger.warning("Deposit %s has no repository; skipping retry", deposit_id)
            return None

        repository = await self.store.get(deposit.repository, Repository)
        transport = self.transports.get(repository.repository_key)
        if transport is None:
            logger.warning(
                "No transport for repository %s (key %r); skipping retry of deposit %s",
                repository.name,
                repository.repository_key,
                deposit_id,
            )
            return None

        submission = await self.store.get(deposit.submission, Submission)

        async def transfer(d: Deposit) -> str | None:
            reference = await transport.attempt_transfer(submission, repository, d)
            d.deposit_status = DepositStatus.SUBMITTED
            d.deposit_status_ref = reference
            return reference

        result = await self.critical.perform_critical(
            deposit_id,
            Deposit,
            lambda d: d.deposit_status == DepositStatus.FAILED,
            lambda d: d.deposit_status == DepositStatus.SUBMITTED,
            transfer,
        )

        if result.success:
            logger.info("Deposit %s resubmitted to %s", deposit_id, repository.name)
        elif result.error is not None:
            logger.error("Retry of deposit %s failed: %s", deposit_id, result.error)
        return result
