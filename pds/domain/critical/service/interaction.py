"""Critical sections over an optimistically versioned entity store.

The store offers no locks or transactions. A critical interaction emulates a
critical section on one entity by re-reading it, checking a precondition,
applying a body, persisting with the version that was read, and checking a
postcondition against what was persisted. Concurrent writers lose at the
version check; the loser's interaction reports failure and the entity is
simply revisited on a later pass.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import logfire

from pds.domain.critical.model.result import CriticalResult
from pds.domain.shared.error import ConflictError
from pds.domain.shared.model.entity import E, EntityId
from pds.domain.shared.port.entity_store import EntityStore
from pds.domain.shared.service import Service

logger = logging.getLogger(__name__)

R = TypeVar("R")

Precondition = Callable[[E], bool]
# Either (entity) -> bool or (entity, result) -> bool
Postcondition = Callable[..., bool]
CriticalBody = Callable[[E], R | Awaitable[R]]


def _accepts_result(predicate: Callable[..., Any]) -> bool:
    """True when the postcondition takes the body result as a second argument."""
    try:
        params = list(inspect.signature(predicate).parameters.values())
    except (TypeError, ValueError):
        return False
    if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params):
        return True
    positional = [
        p
        for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    return len(positional) >= 2


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class CriticalInteraction(Service):
    """Runs critical sections against single entities."""

    store: EntityStore

    async def perform_critical(
        self,
        entity_id: EntityId,
        entity_type: type[E],
        precondition: Precondition[E],
        postcondition: Postcondition,
        critical: CriticalBody[E, R],
        updates_entity: bool = True,
    ) -> CriticalResult[R, E]:
        """Execute ``critical`` against the current state of an entity.

        Never raises for failures inside the interaction: fetch, predicate,
        body and persistence errors are all reported through the returned
        result. The body receives a private copy of the entity and may
        modify it in place; when ``updates_entity`` is set, that copy is
        written back with the version it was read at.
        """
        name = entity_type.__name__
        with logfire.span("CriticalInteraction", entity_type=name, entity_id=entity_id):
            try:
                resource = await self.store.get(entity_id, entity_type)
            except Exception as e:
                logger.warning("Unable to read %s %s: %s", name, entity_id, e)
                return CriticalResult(result=None, resource=None, success=False, error=e)

            try:
                satisfied = bool(await _resolve(precondition(resource)))
            except Exception as e:
                logger.warning("Precondition for %s %s raised: %s", name, entity_id, e)
                return CriticalResult(result=None, resource=resource, success=False, error=e)

            if not satisfied:
                logger.debug("Precondition for %s %s not satisfied", name, entity_id)
                return CriticalResult(result=None, resource=resource, success=False)

            working = resource.model_copy(deep=True)
            try:
                result = await _resolve(critical(working))
            except Exception as e:
                logger.debug("Critical body for %s %s raised: %s", name, entity_id, e)
                return CriticalResult(result=None, resource=resource, success=False, error=e)

            if updates_entity:
                try:
                    working = await self.store.update(working)
                except ConflictError as e:
                    logger.info(
                        "%s %s was modified concurrently (version %s); not updated",
                        name,
                        entity_id,
                        resource.version,
                    )
                    return CriticalResult(result=result, resource=resource, success=False, error=e)
                except Exception as e:
                    logger.warning("Unable to persist %s %s: %s", name, entity_id, e)
                    return CriticalResult(result=result, resource=resource, success=False, error=e)

            try:
                if _accepts_result(postcondition):
                    verified = bool(await _resolve(postcondition(working, result)))
                else:
                    verified = bool(await _resolve(postcondition(working)))
            except Exception as e:
                logger.warning("Postcondition for %s %s raised: %s", name, entity_id, e)
                return CriticalResult(result=result, resource=working, success=False, error=e)

            if not verified:
                logger.debug("Postcondition for %s %s not satisfied", name, entity_id)
            return CriticalResult(result=result, resource=working, success=verified)
