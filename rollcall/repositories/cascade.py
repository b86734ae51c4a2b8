"""Mutation-triggered invalidation across entity classes."""

from __future__ import annotations

import logging
from typing import List

from ..cache.domain import DomainCache
from ..models import EntityClass
from ..telemetry import emit_event

logger = logging.getLogger(__name__)


class CascadeInvalidator:
    def __init__(self, cache: DomainCache) -> None:
        self._cache = cache

    def invalidate(self, entity: EntityClass, partition: str, *, reason: str) -> List[str]:
        """Drop one partition so the next read of it is a remote fetch."""
        store = self._cache.store_for(entity)
        dropped = store.invalidate_partition(partition)  # type: ignore[attr-defined]
        emit_event("cache_invalidated", entity=entity, partition=partition, reason=reason, dropped=len(dropped))
        return dropped

    def session_changed(self, group_id: str) -> None:
        self.invalidate(EntityClass.SESSION, group_id, reason="session_mutation")

    def group_deleted(self, group_id: str) -> None:
        # Member and session partitions of the group are left for callers to refresh.
        self._cache.groups.remove(group_id)

    def login(self) -> None:
        self._cache.groups.clear()
        self._cache.organizations.clear()
        self._cache.profiles.clear_others()
        emit_event("cache_cleared", entities=["groups", "organizations", "profiles:others"], reason="login")

    def logout(self) -> None:
        self._cache.groups.clear()
        self._cache.profiles.clear()
        emit_event("cache_cleared", entities=["groups", "profiles"], reason="logout")
        logger.info("Cleared identity-scoped caches after logout")


__all__ = ["CascadeInvalidator"]
