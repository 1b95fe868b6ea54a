from dataclasses import dataclass
from typing import dataclass_transform


@dataclass_transform(eq_default=False)
class _ServiceMeta(type):
    def __new__(mcs, name: str, bases: tuple, namespace: dict):
        cls = super().__new__(mcs, name, bases, namespace)
        if not any(isinstance(b, mcs) for b in bases):
            return cls
        # Services hold stores and clients; compare by identity
        return dataclass(eq=False)(cls)


class Service(metaclass=_ServiceMeta):
    """Domain service base. Subclasses become dataclasses over their collaborators."""
