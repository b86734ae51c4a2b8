"""Error taxonomy shared by the remote sources, the cache layer and its callers."""

from __future__ import annotations


class RollcallError(Exception):
    """Base class for every failure the cache layer knows how to classify."""


class Unauthenticated(RollcallError):
    """No actor id could be resolved for the current caller."""


class NotFound(RollcallError):
    """A point entity is absent remotely."""


class PermissionDenied(RollcallError):
    """A role check failed (non-owner renaming a group, non-admin removing a member...)."""


class ValidationFailed(RollcallError):
    """Uniqueness violation or malformed payload."""


class RemoteFailure(RollcallError):
    """Transport or server-side error, opaque to the cache layer."""


class SessionNotFound(NotFound):
    pass


class MemberNotFound(NotFound):
    pass


class SessionNotOpen(ValidationFailed):
    """Check-ins are only accepted while a session is open."""


class DuplicateCheckin(ValidationFailed):
    """The member already has a check-in entry for the session."""


__all__ = [
    "DuplicateCheckin",
    "MemberNotFound",
    "NotFound",
    "PermissionDenied",
    "RemoteFailure",
    "RollcallError",
    "SessionNotFound",
    "SessionNotOpen",
    "Unauthenticated",
    "ValidationFailed",
]
