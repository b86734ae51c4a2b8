"""Contract between the cache layer and the hosted relational store."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..errors import RemoteFailure
from ..models import ENTITY_MODELS, EntityClass, RemoteOrder

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
FilterValue = Union[str, Sequence[str]]
Filters = Mapping[str, FilterValue]

M = TypeVar("M", bound=BaseModel)


class RemoteSource(Protocol):
    """Remote data source consumed by the repositories.

    Implementations raise only :mod:`rollcall.errors` types. List values in
    ``filters`` mean "column is one of".
    """

    async def fetch_by_id(self, entity: EntityClass, entity_id: str) -> Row:  # pragma: no cover - protocol definition
        ...

    async def fetch_by_parent(self, entity: EntityClass, parent_key: str) -> List[Row]:  # pragma: no cover
        ...

    async def find(
        self,
        entity: EntityClass,
        filters: Filters,
        *,
        order: Optional[RemoteOrder] = None,
        limit: Optional[int] = None,
    ) -> List[Row]:  # pragma: no cover
        ...

    async def create(self, entity: EntityClass, payload: Mapping[str, Any]) -> Row:  # pragma: no cover
        ...

    async def update(self, entity: EntityClass, entity_id: str, payload: Mapping[str, Any]) -> Row:  # pragma: no cover
        ...

    async def delete(self, entity: EntityClass, entity_id: str) -> None:  # pragma: no cover
        ...

    async def current_actor_id(self) -> str:  # pragma: no cover
        ...

    async def aclose(self) -> None:  # pragma: no cover
        ...


def parse_row(entity: EntityClass, row: Mapping[str, Any]) -> Any:
    """Validate one remote row into the entity's record type."""
    model = ENTITY_MODELS[entity]
    try:
        return model.model_validate(row)
    except ValidationError as exc:
        logger.warning("Malformed %s row from remote source: %s", entity.value, exc)
        raise RemoteFailure(f"Remote source returned a malformed {entity.value} row: {exc}") from exc


def parse_rows(entity: EntityClass, rows: Sequence[Mapping[str, Any]]) -> List[Any]:
    return [parse_row(entity, row) for row in rows]


__all__ = ["Filters", "FilterValue", "RemoteSource", "Row", "parse_row", "parse_rows"]
