"""FailedDepositRetrySchedule - re-attempts failed transfers."""

import logging
from dataclasses import dataclass
from typing import Any

import logfire

from pds.domain.deposit.model.aggregate import Deposit
from pds.domain.deposit.model.value import DepositStatus
from pds.domain.deposit.service.retry import FailedDepositRetryService
from pds.domain.shared.port.entity_store import EntityStore
from pds.domain.shared.schedule import Schedule

logger = logging.getLogger(__name__)


@dataclass
class FailedDepositRetrySchedule(Schedule):
    """Retries every FAILED deposit once per pass. There is no backoff."""

    __schedule_name__ = "failed-deposit-retry"

    store: EntityStore
    service: FailedDepositRetryService

    async def run(self, **params: Any) -> None:
        with logfire.span("FailedDepositRetrySchedule"):
            deposits = await self.store.query(Deposit, {"deposit_status": DepositStatus.FAILED})

            retried = 0
            for deposit in deposits:
                try:
                    result = await self.service.retry(deposit.id)
                except Exception as e:
                    logger.error("Unable to retry deposit %s: %s", deposit.id, e)
                    continue
                if result is not None and result.success:
                    retried += 1

            logger.info("Failed deposit pass: %d candidates, %d resubmitted", len(deposits), retried)
