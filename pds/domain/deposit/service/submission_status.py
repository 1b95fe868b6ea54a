import logging
from collections.abc import Iterable

from pds.domain.critical.model.result import CriticalResult
from pds.domain.critical.service.interaction import CriticalInteraction
from pds.domain.deposit.model.aggregate import Deposit, Submission
from pds.domain.deposit.model.status import AGGREGATED_DEPOSIT_STATUS, DEPOSIT_STATUS
from pds.domain.deposit.model.value import AggregatedDepositStatus, DepositStatus
from pds.domain.shared.model.entity import EntityId
from pds.domain.shared.port.entity_store import EntityStore
from pds.domain.shared.service import Service

logger = logging.getLogger(__name__)


def calculate_aggregated_status(
    deposits: Iterable[Deposit],
    current: AggregatedDepositStatus | None = None,
) -> AggregatedDepositStatus:
    """Derive a submission's aggregated status from its deposits.

    - No deposits: the current status is kept (NOT_STARTED when unset).
    - Any deposit still intermediate: FAILED if any deposit failed,
      otherwise IN_PROGRESS.
    - All deposits terminal: ACCEPTED if every deposit was accepted,
      otherwise REJECTED.
    """
    statuses = [d.deposit_status for d in deposits]
    if not statuses:
        return current or AggregatedDepositStatus.NOT_STARTED

    if any(DEPOSIT_STATUS.is_intermediate(s) for s in statuses):
        if DepositStatus.FAILED in statuses:
            return AggregatedDepositStatus.FAILED
        return AggregatedDepositStatus.IN_PROGRESS

    if all(s == DepositStatus.ACCEPTED for s in statuses):
        return AggregatedDepositStatus.ACCEPTED
    return AggregatedDepositStatus.REJECTED


class SubmissionStatusService(Service):
    """Keeps a submission's aggregated status in line with its deposits."""

    store: EntityStore
    critical: CriticalInteraction

    async def calculate(self, submission: Submission) -> AggregatedDepositStatus:
        deposits = await self.store.query(Deposit, {"submission": submission.id})
        return calculate_aggregated_status(deposits, submission.aggregated_deposit_status)

    async def update_submission_status(
        self, submission_id: EntityId
    ) -> CriticalResult[AggregatedDepositStatus, Submission] | None:
        """Recompute and, when it changed, persist the aggregated status.

        Returns ``None`` when the submission is already terminal or its status
        is unchanged; store errors raised while computing propagate.
        """
        submission = await self.store.get(submission_id, Submission)
        if submission.is_terminal:
            return None

        status = await self.calculate(submission)
        if status == submission.aggregated_deposit_status:
            return None

        def apply(s: Submission) -> AggregatedDepositStatus:
            s.aggregated_deposit_status = status
            return status

        result = await self.critical.perform_critical(
            submission_id,
            Submission,
            lambda s: AGGREGATED_DEPOSIT_STATUS.is_intermediate(s.aggregated_deposit_status),
            lambda s, expected: s.aggregated_deposit_status == expected,
            apply,
        )
        if result.success:
            logger.info(
                "Submission %s aggregated deposit status %s -> %s",
                submission_id,
                submission.aggregated_deposit_status,
                status,
            )
        elif result.error is not None:
            logger.warning(
                "Unable to update aggregated deposit status of submission %s: %s",
                submission_id,
                result.error,
            )
        return result
