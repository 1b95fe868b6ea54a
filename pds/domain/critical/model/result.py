from dataclasses import dataclass
from typing import Generic, TypeVar

from pds.domain.shared.model.entity import Entity

R = TypeVar("R")
T = TypeVar("T", bound=Entity)


@dataclass(frozen=True)
class CriticalResult(Generic[R, T]):
    """Outcome of one critical interaction.

    ``resource`` is the entity as last observed (after persistence when the
    body modified it). ``error`` carries whatever exception stopped the
    interaction; it is ``None`` for a plain precondition/postcondition miss.
    """

    result: R | None
    resource: T | None
    success: bool
    error: BaseException | None = None
