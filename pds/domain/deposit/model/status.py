from pds.domain.deposit.model.value import AggregatedDepositStatus, DepositStatus
from pds.domain.shared.status import StatusClassifier

DEPOSIT_STATUS = StatusClassifier(terminal=(DepositStatus.ACCEPTED, DepositStatus.REJECTED))

AGGREGATED_DEPOSIT_STATUS = StatusClassifier(
    terminal=(AggregatedDepositStatus.ACCEPTED, AggregatedDepositStatus.REJECTED)
)
