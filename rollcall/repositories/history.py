"""Session history: check-ins and other scored actions."""

from __future__ import annotations

import logging
from typing import List, Optional

from ..cache.domain import DomainCache
from ..cache.policy import ExecutionContext
from ..models import EntityClass, HistoryEntryCreate, RemoteOrder, Session, SessionHistoryEntry
from ..remote.base import Filters, RemoteSource, parse_row, parse_rows
from ..scores import ScoreAggregator, SessionStats, session_stats
from .base import BaseRepository
from .cascade import CascadeInvalidator
from .checkin import IdempotencyGuard
from .orchestrator import FetchOrchestrator

logger = logging.getLogger(__name__)


class SessionHistoryRepository(BaseRepository[SessionHistoryEntry]):
    def __init__(
        self,
        cache: DomainCache,
        source: RemoteSource,
        context: ExecutionContext,
        cascade: CascadeInvalidator,
        guard: IdempotencyGuard,
    ) -> None:
        super().__init__(cache.history, source)
        self._history = cache.history
        self._cascade = cascade
        self._guard = guard
        self._orchestrator: FetchOrchestrator[SessionHistoryEntry] = FetchOrchestrator(
            EntityClass.HISTORY, cache.history, source, context
        )

    def get_history_by_session(self, session_id: str) -> List[SessionHistoryEntry]:
        return self._history.list_partition(session_id)

    def get_last_checkin(self, session_id: str, member_id: str) -> Optional[SessionHistoryEntry]:
        return self._history.get_last_checkin(session_id, member_id)

    def has_checked_in(self, session_id: str, member_id: str) -> bool:
        return self._history.has_checked_in(session_id, member_id)

    def can_checkin(self, session_id: str, member_id: str) -> bool:
        """Local answer only; ``perform_checkin`` also asks the remote source."""
        return not self._history.has_checked_in(session_id, member_id)

    def get_user_session_score(self, session_id: str, member_id: str) -> int:
        return ScoreAggregator.session_score(self._history.list_partition(session_id), session_id, member_id)

    def session_stats(self, session_id: str) -> SessionStats:
        return session_stats(self._history.list_partition(session_id))

    async def fetch_session_history(self, session_id: str, force_refresh: bool = False) -> List[SessionHistoryEntry]:
        with self._reading(f"fetch history of session {session_id}"):
            return await self._orchestrator.read(session_id, force=force_refresh)
        return []

    async def fetch_group_history(
        self,
        group_id: str,
        member_id: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> List[SessionHistoryEntry]:
        """History across a group's sessions, newest first. Not cached."""
        with self._reading(f"fetch history of group {group_id}"):
            rows = await self._source.find(EntityClass.SESSION, {"group_id": group_id})
            sessions: List[Session] = parse_rows(EntityClass.SESSION, rows)
            session_ids = [session.id for session in sessions]
            if session_id is not None:
                session_ids = [candidate for candidate in session_ids if candidate == session_id]
            if not session_ids:
                return []
            filters: Filters = {"session_id": session_ids}
            if member_id is not None:
                filters = {**filters, "member_id": member_id}
            history_rows = await self._source.find(
                EntityClass.HISTORY, filters, order=RemoteOrder("created_at", descending=True)
            )
            return parse_rows(EntityClass.HISTORY, history_rows)
        return []

    async def create_history_entry(self, data: HistoryEntryCreate) -> SessionHistoryEntry:
        with self._mutating(f"create history entry for session {data.session_id}"):
            payload = data.to_row()
            payload["by_profile_id"] = await self._source.current_actor_id()
            row = await self._source.create(EntityClass.HISTORY, payload)
            entry: SessionHistoryEntry = parse_row(EntityClass.HISTORY, row)
            self._history.put(entry)
            return entry

    async def perform_checkin(self, session_id: str, member_id: Optional[str] = None) -> SessionHistoryEntry:
        with self._mutating(f"check in to session {session_id}"):
            return await self._guard.perform_checkin(session_id, member_id)

    async def delete_history_entry(self, entry_id: str) -> bool:
        with self._mutating(f"delete history entry {entry_id}"):
            await self._source.delete(EntityClass.HISTORY, entry_id)
            self._history.remove(entry_id)
            return True

    async def refresh_session_history(self, session_id: str) -> List[SessionHistoryEntry]:
        self._cascade.invalidate(EntityClass.HISTORY, session_id, reason="refresh")
        return await self.fetch_session_history(session_id, force_refresh=True)


__all__ = ["SessionHistoryRepository"]
