import logging

import logfire

from pds.domain.deposit.model.aggregate import Deposit
from pds.domain.deposit.service.deposit_status import DepositStatusService
from pds.domain.deposit.service.submission_status import SubmissionStatusService
from pds.domain.shared.model.entity import EntityId
from pds.domain.shared.port.entity_store import EntityStore
from pds.domain.shared.service import Service

logger = logging.getLogger(__name__)


class DepositProcessor(Service):
    """Entry point for deposit change notifications.

    A terminal deposit may complete its submission, so the submission's
    aggregated status is recomputed. An intermediate deposit has its remote
    status resolved.
    """

    store: EntityStore
    status_service: DepositStatusService
    submission_service: SubmissionStatusService

    async def process(self, deposit: Deposit) -> None:
        with logfire.span("ProcessDeposit", deposit_id=deposit.id):
            if deposit.is_terminal:
                logger.debug(
                    "Deposit %s is %s; updating submission %s",
                    deposit.id,
                    deposit.deposit_status,
                    deposit.submission,
                )
                await self.submission_service.update_submission_status(deposit.submission)
            else:
                await self.status_service.process_deposit_status(deposit.id)

    async def process_id(self, deposit_id: EntityId) -> None:
        deposit = await self.store.get(deposit_id, Deposit)
        await self.process(deposit)
