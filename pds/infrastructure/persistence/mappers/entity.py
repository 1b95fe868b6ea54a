from enum import Enum
from typing import Any, Mapping

from sqlalchemy import Table

from pds.domain.deposit.model.aggregate import Deposit, Repository, RepositoryCopy, Submission
from pds.domain.shared.error import ConfigurationError
from pds.domain.shared.model.entity import E, Entity
from pds.infrastructure.persistence.tables import (
    deposits_table,
    repositories_table,
    repository_copies_table,
    submissions_table,
)

ENTITY_TABLES: dict[type[Entity], Table] = {
    Submission: submissions_table,
    Deposit: deposits_table,
    Repository: repositories_table,
    RepositoryCopy: repository_copies_table,
}


def table_for(entity_type: type[Entity]) -> Table:
    try:
        return ENTITY_TABLES[entity_type]
    except KeyError:
        raise ConfigurationError(f"No table mapped for entity type {entity_type.__name__}")


def to_column_value(value: Any) -> Any:
    """Convert a domain value into what the column stores."""
    if isinstance(value, Enum):
        return value.value
    return value


def row_to_entity(entity_type: type[E], row: Mapping[str, Any]) -> E:
    """Convert a database row to an entity."""
    return entity_type.model_validate(dict(row))


def entity_to_dict(entity: Entity) -> dict[str, Any]:
    """Convert an entity to a database dict (enums as their string values)."""
    return entity.model_dump(mode="json")
