"""The bundle of entity stores shared by every repository of one client."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Dict

from ..config import Settings
from ..models import EntityClass, Group, Organization, Session
from .partition_index import PartitionOrder
from .profiles import ProfileStore
from .stores import DomainStore, HistoryStore, MemberStore, PartitionedStore


def _group_store(clock: Callable[[], float]) -> PartitionedStore[Group]:
    return PartitionedStore(EntityClass.GROUP, parent_of=lambda group: group.owner_id, clock=clock)


def _session_store(ttl: timedelta, clock: Callable[[], float]) -> PartitionedStore[Session]:
    return PartitionedStore(
        EntityClass.SESSION,
        parent_of=lambda session: session.group_id,
        order=PartitionOrder.preserve(),
        ttl=ttl,
        clock=clock,
    )


@dataclass
class DomainCache:
    groups: PartitionedStore[Group]
    organizations: DomainStore[Organization]
    profiles: ProfileStore
    members: MemberStore
    sessions: PartitionedStore[Session]
    history: HistoryStore

    @classmethod
    def build(cls, settings: Settings, *, clock: Callable[[], float] = time.monotonic) -> "DomainCache":
        return cls(
            groups=_group_store(clock),
            organizations=DomainStore(EntityClass.ORGANIZATION),
            profiles=ProfileStore(clock=clock),
            members=MemberStore(ttl=timedelta(seconds=settings.member_cache_ttl_seconds), clock=clock),
            sessions=_session_store(timedelta(seconds=settings.session_cache_ttl_seconds), clock),
            history=HistoryStore(ttl=timedelta(seconds=settings.history_cache_ttl_seconds), clock=clock),
        )

    def store_for(self, entity: EntityClass) -> DomainStore:
        return {
            EntityClass.GROUP: self.groups,
            EntityClass.ORGANIZATION: self.organizations,
            EntityClass.PROFILE: self.profiles,
            EntityClass.MEMBER: self.members,
            EntityClass.SESSION: self.sessions,
            EntityClass.HISTORY: self.history,
        }[entity]

    def durable(self) -> Dict[EntityClass, DomainStore]:
        """Stores whose contents survive a restart of the client."""
        return {
            EntityClass.GROUP: self.groups,
            EntityClass.ORGANIZATION: self.organizations,
            EntityClass.PROFILE: self.profiles,
        }

    def clear(self) -> None:
        for entity in EntityClass:
            self.store_for(entity).clear()


__all__ = ["DomainCache"]
