"""Score totals derived from session history entries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from .models import SessionHistoryEntry


@dataclass(frozen=True)
class SessionStats:
    total_entries: int
    total_checkins: int
    total_participants: int
    total_score: int
    latest_activity: Optional[datetime]


class ScoreAggregator:
    """Pure arithmetic over history entries; nothing here touches a cache."""

    @staticmethod
    def session_score(entries: Iterable[SessionHistoryEntry], session_id: str, member_id: str) -> int:
        return sum(
            entry.score for entry in entries if entry.session_id == session_id and entry.member_id == member_id
        )

    @staticmethod
    def total(entries: Iterable[SessionHistoryEntry], member_id: str) -> int:
        return sum(entry.score for entry in entries if entry.member_id == member_id)


def session_stats(entries: Iterable[SessionHistoryEntry]) -> SessionStats:
    entries = list(entries)
    return SessionStats(
        total_entries=len(entries),
        total_checkins=sum(1 for entry in entries if entry.is_checkin),
        total_participants=len({entry.member_id for entry in entries}),
        total_score=sum(entry.score for entry in entries),
        latest_activity=max((entry.created_at for entry in entries), default=None),
    )


__all__ = ["ScoreAggregator", "SessionStats", "session_stats"]
