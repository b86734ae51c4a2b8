"""Per-entity repositories layered over the domain cache and remote source."""

from .base import BaseRepository
from .cascade import CascadeInvalidator
from .checkin import IdempotencyGuard
from .groups import GroupsRepository
from .history import SessionHistoryRepository
from .identity import IdentityService
from .members import MemberPermissions, MembersRepository
from .orchestrator import FetchOrchestrator
from .organizations import OrganizationsRepository
from .profiles import ProfilesRepository
from .sessions import SessionsRepository
from .snapshots import CacheSnapshotRepository, cache_snapshots

__all__ = [
    "BaseRepository",
    "CacheSnapshotRepository",
    "CascadeInvalidator",
    "FetchOrchestrator",
    "GroupsRepository",
    "IdempotencyGuard",
    "IdentityService",
    "MemberPermissions",
    "MembersRepository",
    "OrganizationsRepository",
    "ProfilesRepository",
    "SessionHistoryRepository",
    "SessionsRepository",
    "cache_snapshots",
]
