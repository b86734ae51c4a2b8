"""Secondary indices mapping a parent key to an ordered list of entity ids."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, TypeVar

from pydantic import BaseModel

from .entity_store import EntityStore

V = TypeVar("V", bound=BaseModel)


@dataclass(frozen=True)
class PartitionOrder:
    """How a partition arranges its ids.

    ``sort_key`` of ``None`` keeps the order the ids were handed over in.
    ``newest_first`` partitions also insert single ids at the head.
    """

    sort_key: Optional[Callable[[Any], Any]] = None
    newest_first: bool = False

    @classmethod
    def preserve(cls) -> "PartitionOrder":
        return cls()

    @classmethod
    def ascending(cls, sort_key: Callable[[Any], Any]) -> "PartitionOrder":
        return cls(sort_key=sort_key)

    @classmethod
    def descending(cls, sort_key: Callable[[Any], Any]) -> "PartitionOrder":
        return cls(sort_key=sort_key, newest_first=True)


class PartitionIndex(Generic[V]):
    """Parent key -> ordered entity ids, resolved through ``store``."""

    def __init__(self, store: EntityStore[V], order: Optional[PartitionOrder] = None) -> None:
        self._store = store
        self._order = order or PartitionOrder.preserve()
        self._partitions: Dict[str, List[str]] = {}

    @property
    def order(self) -> PartitionOrder:
        return self._order

    def list_ids(self, parent_key: Optional[str]) -> List[str]:
        if not parent_key:
            return []
        return list(self._partitions.get(parent_key, ()))

    def has_partition(self, parent_key: str) -> bool:
        return parent_key in self._partitions

    def keys(self) -> List[str]:
        return list(self._partitions)

    def append(self, parent_key: str, entity_id: str) -> None:
        ids = self._partitions.setdefault(parent_key, [])
        if entity_id in ids:
            return
        if self._order.newest_first:
            ids.insert(0, entity_id)
        else:
            ids.append(entity_id)

    def replace_all(self, parent_key: str, entity_ids: Iterable[str]) -> List[str]:
        """Install the canonical order for a partition after a full fetch.

        Ids that do not resolve through the store are dropped so the index
        never holds dangling entries.
        """
        unique: List[str] = []
        for entity_id in entity_ids:
            if entity_id not in unique and entity_id in self._store:
                unique.append(entity_id)
        sort_key = self._order.sort_key
        if sort_key is not None:
            unique.sort(
                key=lambda entity_id: sort_key(self._store.get(entity_id)),
                reverse=self._order.newest_first,
            )
        self._partitions[parent_key] = unique
        return list(unique)

    def remove_id(self, parent_key: str, entity_id: str) -> None:
        ids = self._partitions.get(parent_key)
        if ids and entity_id in ids:
            ids.remove(entity_id)

    def discard_everywhere(self, entity_id: str) -> None:
        for ids in self._partitions.values():
            if entity_id in ids:
                ids.remove(entity_id)

    def clear_partition(self, parent_key: str) -> List[str]:
        return self._partitions.pop(parent_key, [])

    def clear(self) -> None:
        self._partitions.clear()


__all__ = ["PartitionIndex", "PartitionOrder"]
