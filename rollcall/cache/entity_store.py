"""Keyed map from an entity id to its latest known value."""

from __future__ import annotations

from typing import Any, Callable, Dict, Generic, Iterable, Iterator, List, Mapping, Optional, TypeVar

from pydantic import BaseModel

V = TypeVar("V", bound=BaseModel)


def _default_key(value: Any) -> str:
    return value.id


class EntityStore(Generic[V]):
    """Process-local map of entity values; last write wins."""

    def __init__(self, key: Callable[[V], str] = _default_key) -> None:
        self._key = key
        self._items: Dict[str, V] = {}

    def key_of(self, value: V) -> str:
        return self._key(value)

    def get(self, entity_id: Optional[str]) -> Optional[V]:
        if not entity_id:
            return None
        return self._items.get(entity_id)

    def get_many(self, entity_ids: Iterable[str]) -> List[V]:
        return [self._items[entity_id] for entity_id in entity_ids if entity_id in self._items]

    def put(self, value: V) -> None:
        self._items[self._key(value)] = value

    def put_many(self, values: Iterable[V]) -> None:
        for value in values:
            self._items[self._key(value)] = value

    def remove(self, entity_id: str) -> Optional[V]:
        return self._items.pop(entity_id, None)

    def patch(self, entity_id: str, updates: Mapping[str, Any]) -> Optional[V]:
        """Shallow-merge ``updates`` into the stored value; no-op when absent."""
        existing = self._items.get(entity_id)
        if existing is None:
            return None
        patched = existing.model_copy(update=dict(updates))
        self._items[entity_id] = patched
        return patched

    def values(self) -> List[V]:
        return list(self._items.values())

    def filter(self, predicate: Callable[[V], bool]) -> List[V]:
        return [value for value in self._items.values() if predicate(value)]

    def clear(self) -> None:
        self._items.clear()

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._items))


__all__ = ["EntityStore"]
