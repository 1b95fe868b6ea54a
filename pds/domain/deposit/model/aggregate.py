from pds.domain.deposit.model.status import AGGREGATED_DEPOSIT_STATUS, DEPOSIT_STATUS
from pds.domain.deposit.model.value import (
    AggregatedDepositStatus,
    CopyStatus,
    DepositStatus,
)
from pds.domain.shared.model.entity import Entity, EntityId


class Repository(Entity):
    """A remote repository that deposits are transferred into."""

    name: str
    # Links the entity to its RepositoryConfig (matched case-insensitively)
    repository_key: str | None = None


class RepositoryCopy(Entity):
    """The copy of a submission's content held by a repository."""

    copy_status: CopyStatus | None = None
    repository: EntityId | None = None
    access_url: str | None = None
    external_ids: list[str] = []


class Submission(Entity):
    aggregated_deposit_status: AggregatedDepositStatus | None = AggregatedDepositStatus.NOT_STARTED
    submitted: bool = False
    repositories: list[EntityId] = []

    @property
    def is_terminal(self) -> bool:
        return AGGREGATED_DEPOSIT_STATUS.is_terminal(self.aggregated_deposit_status)


class Deposit(Entity):
    deposit_status: DepositStatus | None = None
    # URI of the remote status document (e.g. a SWORD statement)
    deposit_status_ref: str | None = None
    submission: EntityId
    repository: EntityId | None = None
    repository_copy: EntityId | None = None

    @property
    def is_terminal(self) -> bool:
        return DEPOSIT_STATUS.is_terminal(self.deposit_status)
