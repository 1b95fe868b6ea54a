"""Terminal/intermediate classification of lifecycle statuses.

A terminal status is final: nothing in this system moves an entity out of it.
Every other value, including an unset (``None``) status, is intermediate and
makes the entity eligible for reconciliation.
"""

from collections.abc import Iterable
from enum import StrEnum
from typing import Generic, TypeVar

S = TypeVar("S", bound=StrEnum)


class StatusClassifier(Generic[S]):
    """Classifies statuses of one enumeration as terminal or intermediate."""

    def __init__(self, terminal: Iterable[S]) -> None:
        self._terminal: frozenset[S] = frozenset(terminal)

    def is_terminal(self, status: S | None) -> bool:
        return status is not None and status in self._terminal

    def is_intermediate(self, status: S | None) -> bool:
        return not self.is_terminal(status)

    def intermediate_statuses(self, statuses: Iterable[S]) -> list[S]:
        """Filter an enumeration down to its intermediate members."""
        return [s for s in statuses if not self.is_terminal(s)]
