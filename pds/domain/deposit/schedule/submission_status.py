"""SubmissionStatusSchedule - recomputes aggregated status of open submissions."""

import logging
from dataclasses import dataclass
from typing import Any

import logfire

from pds.domain.deposit.model.aggregate import Submission
from pds.domain.deposit.model.status import AGGREGATED_DEPOSIT_STATUS
from pds.domain.deposit.model.value import AggregatedDepositStatus
from pds.domain.deposit.service.submission_status import SubmissionStatusService
from pds.domain.shared.error import DomainError, InfrastructureError, ReconciliationAbortedError
from pds.domain.shared.port.entity_store import EntityStore
from pds.domain.shared.schedule import Schedule

logger = logging.getLogger(__name__)


@dataclass
class SubmissionStatusSchedule(Schedule):
    """Updates submitted submissions whose aggregated deposit status is not final.

    Store failures abort the run: without the store nothing else in the pass
    can succeed. Failures scoped to one submission are logged and skipped.
    """

    __schedule_name__ = "submission-status"

    store: EntityStore
    service: SubmissionStatusService

    async def run(self, **params: Any) -> None:
        with logfire.span("SubmissionStatusSchedule"):
            intermediate: list[AggregatedDepositStatus | None] = [
                *AGGREGATED_DEPOSIT_STATUS.intermediate_statuses(AggregatedDepositStatus),
                None,
            ]
            try:
                submissions = await self.store.query(
                    Submission,
                    {"submitted": True, "aggregated_deposit_status": intermediate},
                )
            except InfrastructureError as e:
                raise ReconciliationAbortedError(f"Unable to query submissions: {e}") from e

            updated = 0
            for submission in submissions:
                try:
                    result = await self.service.update_submission_status(submission.id)
                except InfrastructureError as e:
                    raise ReconciliationAbortedError(
                        f"Unable to update submission {submission.id}: {e}"
                    ) from e
                except DomainError as e:
                    logger.error("Unable to update submission %s: %s", submission.id, e)
                    continue
                if result is not None and result.success:
                    updated += 1

            logger.info(
                "Submission status pass: %d candidates, %d updated", len(submissions), updated
            )
