from __future__ import annotations

import logging
from typing import List, Optional

from ..cache.domain import DomainCache
from ..cache.policy import ExecutionContext
from ..models import EntityClass, RemoteOrder, Session, SessionCreate, SessionUpdate
from ..remote.base import RemoteSource, parse_row, parse_rows
from .base import BaseRepository
from .cascade import CascadeInvalidator
from .orchestrator import FetchOrchestrator

logger = logging.getLogger(__name__)

RECENT_SESSIONS_LIMIT = 5


class SessionsRepository(BaseRepository[Session]):
    """Sessions partitioned by group.

    Every session mutation invalidates its group's partition after the
    write-through, so the next list read goes back to the remote source.
    """

    def __init__(
        self,
        cache: DomainCache,
        source: RemoteSource,
        context: ExecutionContext,
        cascade: CascadeInvalidator,
    ) -> None:
        super().__init__(cache.sessions, source)
        self._sessions = cache.sessions
        self._cascade = cascade
        self._orchestrator: FetchOrchestrator[Session] = FetchOrchestrator(
            EntityClass.SESSION, cache.sessions, source, context
        )

    def get_session(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def get_sessions_by_group(self, group_id: str) -> List[Session]:
        return self._sessions.list_partition(group_id)

    async def fetch_sessions_by_group(self, group_id: str, force_refresh: bool = False) -> List[Session]:
        with self._reading(f"fetch sessions of group {group_id}"):
            return await self._orchestrator.read(group_id, force=force_refresh)
        return []

    async def fetch_session(self, session_id: str) -> Optional[Session]:
        # Always remote: callers use this to observe status changes.
        with self._reading(f"fetch session {session_id}"):
            row = await self._source.fetch_by_id(EntityClass.SESSION, session_id)
            session: Session = parse_row(EntityClass.SESSION, row)
            self._sessions.put(session)
            return session
        return None

    async def fetch_recent_sessions(self, group_id: str, limit: int = RECENT_SESSIONS_LIMIT) -> List[Session]:
        with self._reading(f"fetch recent sessions of group {group_id}"):
            rows = await self._source.find(
                EntityClass.SESSION,
                {"group_id": group_id},
                order=RemoteOrder("updated_at", descending=True),
                limit=limit,
            )
            return parse_rows(EntityClass.SESSION, rows)
        return []

    async def create_session(self, data: SessionCreate) -> Session:
        with self._mutating("create session"):
            row = await self._source.create(EntityClass.SESSION, data.to_row())
            session: Session = parse_row(EntityClass.SESSION, row)
            self._sessions.put(session)
            self._cascade.session_changed(session.group_id)
            return session

    async def update_session(self, session_id: str, data: SessionUpdate) -> Session:
        with self._mutating(f"update session {session_id}"):
            row = await self._source.update(EntityClass.SESSION, session_id, data.to_row())
            session: Session = parse_row(EntityClass.SESSION, row)
            self._sessions.put(session)
            self._cascade.session_changed(session.group_id)
            return session

    async def delete_session(self, session_id: str) -> bool:
        with self._mutating(f"delete session {session_id}"):
            cached = self._sessions.get(session_id)
            await self._source.delete(EntityClass.SESSION, session_id)
            self._sessions.remove(session_id)
            if cached is not None:
                self._cascade.session_changed(cached.group_id)
            return True

    async def refresh_group_sessions(self, group_id: str) -> List[Session]:
        self._cascade.invalidate(EntityClass.SESSION, group_id, reason="refresh")
        return await self.fetch_sessions_by_group(group_id, force_refresh=True)

    async def refresh_session(self, session_id: str) -> Optional[Session]:
        return await self.fetch_session(session_id)


__all__ = ["RECENT_SESSIONS_LIMIT", "SessionsRepository"]
