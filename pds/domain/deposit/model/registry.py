"""Registries keyed by repository key (case-insensitive)."""

from collections.abc import Iterator, Mapping
from typing import Generic, TypeVar

from pds.config import RepositoryConfig
from pds.domain.deposit.port.transport import Transport

V = TypeVar("V")


class _KeyedRegistry(Generic[V]):
    def __init__(self, items: Mapping[str, V]) -> None:
        self._items = {key.lower(): value for key, value in items.items()}

    def get(self, key: str | None) -> V | None:
        if key is None:
            return None
        return self._items.get(key.lower())

    def __contains__(self, key: str) -> bool:
        return key.lower() in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def keys(self) -> list[str]:
        return list(self._items.keys())


class RepositoryConfigRegistry(_KeyedRegistry[RepositoryConfig]):
    """Configured repositories."""

    @classmethod
    def from_configs(cls, configs: list[RepositoryConfig]) -> "RepositoryConfigRegistry":
        return cls({c.key: c for c in configs})


class TransportRegistry(_KeyedRegistry[Transport]):
    """Transports able to (re)transfer a deposit into a repository."""
