"""Fresh-first decision for partitioned reads."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ExecutionContext(str, Enum):
    CLIENT = "client"
    SERVER = "server"


class FetchDecision(str, Enum):
    FETCH_FRESH = "fetch_fresh"
    USE_CACHE = "use_cache"


@dataclass(frozen=True)
class FetchPlan:
    decision: FetchDecision
    reason: Optional[str] = None

    @property
    def fetch_fresh(self) -> bool:
        return self.decision is FetchDecision.FETCH_FRESH


def decide(*, force: bool, valid: bool, context: ExecutionContext) -> FetchPlan:
    """Return the fetch plan for a partition read.

    A client context always goes back to the network, whatever the cache says.
    """
    if force:
        return FetchPlan(FetchDecision.FETCH_FRESH, "forced")
    if not valid:
        return FetchPlan(FetchDecision.FETCH_FRESH, "stale")
    if context is ExecutionContext.CLIENT:
        return FetchPlan(FetchDecision.FETCH_FRESH, "client_context")
    return FetchPlan(FetchDecision.USE_CACHE)


__all__ = ["ExecutionContext", "FetchDecision", "FetchPlan", "decide"]
