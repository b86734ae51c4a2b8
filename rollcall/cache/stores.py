"""Per-entity-class stores: values, partitions, freshness and shared status."""

from __future__ import annotations

import time
from datetime import timedelta
from typing import Any, Callable, Generic, Iterable, List, Mapping, Optional, TypeVar

from pydantic import BaseModel

from ..models import (
    CHECKIN_ACTION,
    EntityClass,
    GroupMember,
    MemberRole,
    SessionHistoryEntry,
)
from .entity_store import EntityStore
from .partition_index import PartitionIndex, PartitionOrder
from .validity import ValidityTracker

V = TypeVar("V", bound=BaseModel)


class DomainStore(Generic[V]):
    """Entity store plus the per-class ``error``/``loading`` status callers observe."""

    def __init__(self, entity: EntityClass) -> None:
        self.entity = entity
        self.items: EntityStore[V] = EntityStore()
        self.error: Optional[str] = None
        self._in_flight = 0

    @property
    def loading(self) -> bool:
        return self._in_flight > 0

    def begin(self) -> None:
        self._in_flight += 1
        self.error = None

    def finish(self) -> None:
        self._in_flight = max(0, self._in_flight - 1)

    def set_error(self, message: Optional[str]) -> None:
        self.error = message

    def get(self, entity_id: Optional[str]) -> Optional[V]:
        return self.items.get(entity_id)

    def put(self, value: V) -> None:
        self.items.put(value)

    def put_many(self, values: Iterable[V]) -> None:
        for value in values:
            self.put(value)

    def remove(self, entity_id: str) -> Optional[V]:
        return self.items.remove(entity_id)

    def patch(self, entity_id: str, updates: Mapping[str, Any]) -> Optional[V]:
        return self.items.patch(entity_id, updates)

    def values(self) -> List[V]:
        return self.items.values()

    def clear(self) -> None:
        self.items.clear()
        self.error = None
        self._in_flight = 0


class PartitionedStore(DomainStore[V]):
    """Domain store with one secondary index keyed by the parent entity."""

    def __init__(
        self,
        entity: EntityClass,
        *,
        parent_of: Callable[[V], Optional[str]],
        order: Optional[PartitionOrder] = None,
        ttl: Optional[timedelta] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        super().__init__(entity)
        self._parent_of = parent_of
        self.index: PartitionIndex[V] = PartitionIndex(self.items, order)
        self.validity = ValidityTracker(ttl, clock=clock)

    def parent_of(self, value: V) -> Optional[str]:
        return self._parent_of(value)

    def put(self, value: V) -> None:
        entity_id = self.items.key_of(value)
        previous = self.items.get(entity_id)
        self.items.put(value)
        parent = self._parent_of(value)
        if previous is not None:
            old_parent = self._parent_of(previous)
            if old_parent and old_parent != parent:
                self.index.remove_id(old_parent, entity_id)
        if parent:
            self.index.append(parent, entity_id)

    def replace_partition(self, parent_key: str, values: List[V]) -> List[V]:
        """Write a full partition fetch through the store, the index and the tracker."""
        self.items.put_many(values)
        self.index.replace_all(parent_key, [self.items.key_of(value) for value in values])
        self.validity.mark_fresh(parent_key)
        return values

    def list_partition(self, parent_key: Optional[str]) -> List[V]:
        return self.items.get_many(self.index.list_ids(parent_key))

    def is_valid(self, parent_key: str) -> bool:
        return self.validity.is_valid(parent_key)

    def remove(self, entity_id: str) -> Optional[V]:
        removed = self.items.remove(entity_id)
        self.index.discard_everywhere(entity_id)
        return removed

    def invalidate_partition(self, parent_key: str) -> List[str]:
        """Forget a partition: its timestamp, its index entry and its values."""
        self.validity.invalidate(parent_key)
        dropped = self.index.clear_partition(parent_key)
        for entity_id in dropped:
            self.items.remove(entity_id)
        return dropped

    def clear(self) -> None:
        super().clear()
        self.index.clear()
        self.validity.clear()


class MemberStore(PartitionedStore[GroupMember]):
    def __init__(self, *, ttl: Optional[timedelta] = None, clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__(
            EntityClass.MEMBER,
            parent_of=lambda member: member.group_id,
            order=PartitionOrder.ascending(lambda member: member.joined_at),
            ttl=ttl,
            clock=clock,
        )

    def get_member_by_profile(self, group_id: str, profile_id: str) -> Optional[GroupMember]:
        for member in self.list_partition(group_id):
            if member.profile_id == profile_id:
                return member
        return None

    def is_user_owner(self, group_id: str, profile_id: str) -> bool:
        member = self.get_member_by_profile(group_id, profile_id)
        return member is not None and member.role is MemberRole.OWNER

    def is_user_admin_or_owner(self, group_id: str, profile_id: str) -> bool:
        member = self.get_member_by_profile(group_id, profile_id)
        return member is not None and member.role in (MemberRole.OWNER, MemberRole.ADMIN)


class HistoryStore(PartitionedStore[SessionHistoryEntry]):
    def __init__(self, *, ttl: Optional[timedelta] = None, clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__(
            EntityClass.HISTORY,
            parent_of=lambda entry: entry.session_id,
            order=PartitionOrder.descending(lambda entry: entry.created_at),
            ttl=ttl,
            clock=clock,
        )

    def get_last_checkin(self, session_id: str, member_id: str) -> Optional[SessionHistoryEntry]:
        for entry in self.list_partition(session_id):
            if entry.member_id == member_id and entry.action == CHECKIN_ACTION:
                return entry
        return None

    def has_checked_in(self, session_id: str, member_id: str) -> bool:
        return self.get_last_checkin(session_id, member_id) is not None


__all__ = ["DomainStore", "HistoryStore", "MemberStore", "PartitionedStore"]
