from __future__ import annotations

from abc import abstractmethod
from typing import Protocol

from pds.domain.deposit.model.aggregate import Deposit, Repository, Submission
from pds.domain.shared.port import Port


class Transport(Port, Protocol):
    """Packages a submission and transfers it into a repository.

    Package assembly and the wire protocol live behind this port.
    """

    @abstractmethod
    async def attempt_transfer(
        self, submission: Submission, repository: Repository, deposit: Deposit
    ) -> str | None:
        """Transfer the submission; return the new status reference, if any.

        Raises on any transfer failure.
        """
        ...
