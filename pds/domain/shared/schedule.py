from abc import ABC, abstractmethod
from typing import Any, ClassVar


class Schedule(ABC):
    """Base class for periodic reconciliation tasks.

    Subclasses are dataclasses with DI-injected dependencies. Timing (fixed
    delay, initial delay) comes from config; ``__schedule_name__`` is the key
    used to look that config up and to name the driver task.

    Example:
        @dataclass
        class DepositStatusSchedule(Schedule):
            __schedule_name__ = "deposit-status"

            store: EntityStore
            service: DepositStatusService

            async def run(self, **params: Any) -> None:
                for deposit in await self.store.query(Deposit, {...}):
                    await self.service.process_deposit_status(deposit.id)
    """

    __schedule_name__: ClassVar[str]

    @abstractmethod
    async def run(self, **params: Any) -> None:
        """Run one reconciliation pass."""
        ...
