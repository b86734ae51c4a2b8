"""Per-partition freshness bookkeeping."""

from __future__ import annotations

import time
from datetime import timedelta
from typing import Callable, Dict, Optional


class ValidityTracker:
    """Remembers when each partition was last fetched.

    A tracker without a TTL treats a partition as valid from its first
    successful fetch until it is invalidated.
    """

    def __init__(self, ttl: Optional[timedelta] = None, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl.total_seconds() if ttl is not None else None
        self._clock = clock
        self._stamps: Dict[str, float] = {}

    @property
    def ttl(self) -> Optional[timedelta]:
        return timedelta(seconds=self._ttl) if self._ttl is not None else None

    def mark_fresh(self, partition_key: str) -> None:
        self._stamps[partition_key] = self._clock()

    def last_fetch(self, partition_key: str) -> Optional[float]:
        return self._stamps.get(partition_key)

    def is_valid(self, partition_key: str) -> bool:
        stamp = self._stamps.get(partition_key)
        if stamp is None:
            return False
        if self._ttl is None:
            return True
        return self._clock() - stamp < self._ttl

    def invalidate(self, partition_key: str) -> None:
        self._stamps.pop(partition_key, None)

    def clear(self) -> None:
        self._stamps.clear()


__all__ = ["ValidityTracker"]
