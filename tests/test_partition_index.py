from __future__ import annotations

from datetime import datetime, timedelta, timezone

from rollcall.cache.entity_store import EntityStore
from rollcall.cache.partition_index import PartitionIndex, PartitionOrder
from rollcall.models import SessionHistoryEntry

BASE = datetime(2024, 3, 1, tzinfo=timezone.utc)


def _entry(entry_id: str, minutes: int) -> SessionHistoryEntry:
    return SessionHistoryEntry(
        id=entry_id,
        session_id="s1",
        member_id="m1",
        by_profile_id="m1",
        action="checkin",
        created_at=BASE + timedelta(minutes=minutes),
    )


def _newest_first(store: EntityStore[SessionHistoryEntry]) -> PartitionIndex[SessionHistoryEntry]:
    return PartitionIndex(store, PartitionOrder.descending(lambda entry: entry.created_at))


def test_append_is_idempotent() -> None:
    store: EntityStore[SessionHistoryEntry] = EntityStore()
    index = PartitionIndex(store)

    index.append("s1", "a")
    index.append("s1", "b")
    index.append("s1", "a")

    assert index.list_ids("s1") == ["a", "b"]


def test_newest_first_partitions_insert_at_head() -> None:
    store: EntityStore[SessionHistoryEntry] = EntityStore()
    index = _newest_first(store)

    index.append("s1", "old")
    index.append("s1", "new")

    assert index.list_ids("s1") == ["new", "old"]


def test_replace_all_dedupes_sorts_and_drops_unresolved_ids() -> None:
    store: EntityStore[SessionHistoryEntry] = EntityStore()
    store.put_many([_entry("e1", 1), _entry("e2", 5), _entry("e3", 3)])
    index = _newest_first(store)

    installed = index.replace_all("s1", ["e1", "e2", "ghost", "e3", "e1"])

    assert installed == ["e2", "e3", "e1"]
    assert index.list_ids("s1") == ["e2", "e3", "e1"]


def test_preserve_order_keeps_server_order() -> None:
    store: EntityStore[SessionHistoryEntry] = EntityStore()
    store.put_many([_entry("e1", 1), _entry("e2", 5)])
    index = PartitionIndex(store, PartitionOrder.preserve())

    index.replace_all("s1", ["e1", "e2"])

    assert index.list_ids("s1") == ["e1", "e2"]


def test_removal_helpers() -> None:
    store: EntityStore[SessionHistoryEntry] = EntityStore()
    index = PartitionIndex(store)
    index.append("s1", "a")
    index.append("s1", "b")
    index.append("s2", "a")

    index.remove_id("s1", "b")
    assert index.list_ids("s1") == ["a"]

    index.discard_everywhere("a")
    assert index.list_ids("s1") == []
    assert index.list_ids("s2") == []

    index.append("s3", "c")
    assert index.clear_partition("s3") == ["c"]
    assert not index.has_partition("s3")
    assert index.list_ids(None) == []
