"""In-memory domain caches shared across the repositories of one client."""

from .domain import DomainCache
from .entity_store import EntityStore
from .partition_index import PartitionIndex, PartitionOrder
from .policy import ExecutionContext, FetchDecision, FetchPlan, decide
from .profiles import MineProfile, OtherProfile, ProfileEntry, ProfileStore
from .stores import DomainStore, HistoryStore, MemberStore, PartitionedStore
from .validity import ValidityTracker

__all__ = [
    "DomainCache",
    "DomainStore",
    "EntityStore",
    "ExecutionContext",
    "FetchDecision",
    "FetchPlan",
    "HistoryStore",
    "MemberStore",
    "MineProfile",
    "OtherProfile",
    "PartitionIndex",
    "PartitionOrder",
    "PartitionedStore",
    "ProfileEntry",
    "ProfileStore",
    "ValidityTracker",
    "decide",
]
