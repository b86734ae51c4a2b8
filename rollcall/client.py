"""Wiring: one cache, one remote source and the repositories that share them."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import anyio

from .cache.domain import DomainCache
from .cache.policy import ExecutionContext
from .config import Settings, get_settings
from .db.session import CacheDatabase
from .logging_config import configure_logging
from .remote.base import RemoteSource
from .remote.postgrest import PostgrestSource
from .repositories import (
    CascadeInvalidator,
    GroupsRepository,
    IdempotencyGuard,
    IdentityService,
    MembersRepository,
    OrganizationsRepository,
    ProfilesRepository,
    SessionHistoryRepository,
    SessionsRepository,
    cache_snapshots,
)

logger = logging.getLogger(__name__)


class RollcallClient:
    """Entry point for callers: repositories plus cache persistence.

    Each client owns its own :class:`DomainCache`, so two clients never share
    cached state.
    """

    def __init__(
        self,
        settings: Settings,
        source: RemoteSource,
        *,
        cache: Optional[DomainCache] = None,
        database: Optional[CacheDatabase] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self.source = source
        self.cache = cache or DomainCache.build(settings, clock=clock)
        self.context = ExecutionContext(settings.execution_context)
        self._database = database

        self.cascade = CascadeInvalidator(self.cache)
        self.checkin_guard = IdempotencyGuard(self.cache, source, score=settings.checkin_score)
        self.organizations = OrganizationsRepository(self.cache, source)
        self.profiles = ProfilesRepository(self.cache, source, self.context)
        self.groups = GroupsRepository(self.cache, source, self.cascade)
        self.members = MembersRepository(self.cache, source, self.context, self.cascade)
        self.sessions = SessionsRepository(self.cache, source, self.context, self.cascade)
        self.history = SessionHistoryRepository(self.cache, source, self.context, self.cascade, self.checkin_guard)
        self.identity = IdentityService(self.cascade, self.profiles, self.groups)

    async def __aenter__(self) -> "RollcallClient":
        await anyio.to_thread.run_sync(self.restore)
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    def restore(self) -> int:
        """Load persisted groups, organizations and profiles; returns the count."""
        if self._database is None:
            return 0
        with self._database.session_scope(commit=False) as session:
            restored = cache_snapshots.load(session, self.cache)
        logger.info("Restored %d cached entities from %s", restored, self._database.database_url)
        return restored

    def persist(self) -> int:
        if self._database is None:
            return 0
        with self._database.session_scope() as session:
            saved = cache_snapshots.save(session, self.cache)
        logger.info("Persisted %d cached entities", saved)
        return saved

    async def aclose(self) -> None:
        try:
            await anyio.to_thread.run_sync(self.persist)
        finally:
            await self.source.aclose()
            if self._database is not None:
                self._database.dispose()


def build_client(
    settings: Optional[Settings] = None,
    source: Optional[RemoteSource] = None,
    *,
    clock: Callable[[], float] = time.monotonic,
) -> RollcallClient:
    configure_logging()
    settings = settings or get_settings()
    if source is None:
        source = PostgrestSource.from_settings(settings)
    return RollcallClient(
        settings,
        source,
        database=CacheDatabase.from_settings(settings),
        clock=clock,
    )


__all__ = ["RollcallClient", "build_client"]
