"""Check-in: at most one check-in entry per member and session."""

from __future__ import annotations

import logging
from typing import Optional

from ..cache.domain import DomainCache
from ..errors import DuplicateCheckin, NotFound, SessionNotFound, SessionNotOpen
from ..models import CHECKIN_ACTION, EntityClass, HistoryEntryCreate, Session, SessionHistoryEntry, SessionStatus
from ..remote.base import RemoteSource, parse_row
from ..telemetry import emit_event

logger = logging.getLogger(__name__)

CHECKIN_DESCRIPTION = "Checked in to the session"


class IdempotencyGuard:
    """Validates and records check-ins.

    Both the local history cache and the remote source are consulted before
    the entry is created. Two concurrent check-ins for the same member can
    still both pass the checks; nothing here serializes them.
    """

    def __init__(self, cache: DomainCache, source: RemoteSource, *, score: int = 100) -> None:
        self._history = cache.history
        self._sessions = cache.sessions
        self._source = source
        self._score = score

    async def perform_checkin(self, session_id: str, member_id: Optional[str] = None) -> SessionHistoryEntry:
        actor_id = await self._source.current_actor_id()
        target_id = member_id or actor_id

        session = await self._load_session(session_id)
        if session.status is not SessionStatus.OPEN:
            raise SessionNotOpen(f"Session {session_id} is {session.status.value}, check-in is only allowed while open")

        await self._ensure_first_checkin(session_id, target_id)

        payload = HistoryEntryCreate(
            session_id=session_id,
            member_id=target_id,
            action=CHECKIN_ACTION,
            action_description=CHECKIN_DESCRIPTION,
            score=self._score,
        ).to_row()
        payload["by_profile_id"] = actor_id
        row = await self._source.create(EntityClass.HISTORY, payload)
        entry: SessionHistoryEntry = parse_row(EntityClass.HISTORY, row)
        self._history.put(entry)

        emit_event(
            "checkin_recorded",
            session_id=session_id,
            member_id=target_id,
            by_profile_id=actor_id,
            score=entry.score,
        )
        return entry

    async def _load_session(self, session_id: str) -> Session:
        try:
            row = await self._source.fetch_by_id(EntityClass.SESSION, session_id)
        except NotFound as exc:
            raise SessionNotFound(f"Session {session_id} was not found") from exc
        session: Session = parse_row(EntityClass.SESSION, row)
        self._sessions.put(session)
        return session

    async def _ensure_first_checkin(self, session_id: str, member_id: str) -> None:
        if self._history.has_checked_in(session_id, member_id):
            raise DuplicateCheckin(f"Member {member_id} already checked in to session {session_id}")
        existing = await self._source.find(
            EntityClass.HISTORY,
            {"session_id": session_id, "member_id": member_id, "action": CHECKIN_ACTION},
            limit=1,
        )
        if existing:
            raise DuplicateCheckin(f"Member {member_id} already checked in to session {session_id}")


__all__ = ["CHECKIN_DESCRIPTION", "IdempotencyGuard"]
