"""DepositStatusSchedule - resolves remote status of submitted deposits."""

import logging
from dataclasses import dataclass
from typing import Any

import logfire

from pds.domain.deposit.model.aggregate import Deposit
from pds.domain.deposit.model.value import DepositStatus
from pds.domain.deposit.service.deposit_status import DepositStatusService
from pds.domain.shared.port.entity_store import EntityStore
from pds.domain.shared.schedule import Schedule

logger = logging.getLogger(__name__)


@dataclass
class DepositStatusSchedule(Schedule):
    """Checks every SUBMITTED or not yet classified deposit against its repository.

    FAILED deposits are left to FailedDepositRetrySchedule.
    """

    __schedule_name__ = "deposit-status"

    store: EntityStore
    service: DepositStatusService

    async def run(self, **params: Any) -> None:
        with logfire.span("DepositStatusSchedule"):
            deposits = await self.store.query(
                Deposit, {"deposit_status": [DepositStatus.SUBMITTED, None]}
            )

            resolved = failed = 0
            for deposit in deposits:
                try:
                    result = await self.service.process_deposit_status(deposit.id)
                except Exception as e:
                    failed += 1
                    logger.error("Unable to update status of deposit %s: %s", deposit.id, e)
                    continue
                if result.success and result.resource is not None and result.resource.is_terminal:
                    resolved += 1

            logger.info(
                "Deposit status pass: %d candidates, %d resolved, %d failed",
                len(deposits),
                resolved,
                failed,
            )
