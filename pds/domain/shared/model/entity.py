from typing import TypeVar

from pydantic import BaseModel, ConfigDict

EntityId = str


class Entity(BaseModel):
    """A versioned, independently stored domain object.

    ``version`` is owned by the entity store: every read returns it and every
    update must carry the version that was read. ``None`` means the entity has
    not been persisted yet.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: EntityId
    version: int | None = None


E = TypeVar("E", bound=Entity)
