"""Custom Dishka scopes for PDS."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """PDS dependency injection scopes.

    Hierarchy: APP -> UOW

    - APP: Application lifetime (engine, HTTP client, registries)
    - UOW: One reconciliation run or one CLI operation
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
