"""Client-side domain cache and synchronization layer for group check-ins."""

from .client import RollcallClient, build_client
from .config import Settings, get_settings
from .errors import (
    DuplicateCheckin,
    MemberNotFound,
    NotFound,
    PermissionDenied,
    RemoteFailure,
    RollcallError,
    SessionNotFound,
    SessionNotOpen,
    Unauthenticated,
    ValidationFailed,
)

__all__ = [
    "DuplicateCheckin",
    "MemberNotFound",
    "NotFound",
    "PermissionDenied",
    "RemoteFailure",
    "RollcallClient",
    "RollcallError",
    "SessionNotFound",
    "SessionNotOpen",
    "Settings",
    "Unauthenticated",
    "ValidationFailed",
    "build_client",
    "get_settings",
]
