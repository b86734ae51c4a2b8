"""Entity records and mutation payloads for the check-in domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


class EntityClass(str, Enum):
    ORGANIZATION = "organizations"
    PROFILE = "profiles"
    GROUP = "groups"
    MEMBER = "group_profile"
    SESSION = "sessions"
    HISTORY = "session_history"

    @property
    def table(self) -> str:
        return self.value


@dataclass(frozen=True)
class RemoteOrder:
    column: str
    descending: bool = False


# Column a partition of each class is keyed by on the remote side.
PARTITION_COLUMNS: Dict[EntityClass, str] = {
    EntityClass.PROFILE: "organization_id",
    EntityClass.GROUP: "owner_id",
    EntityClass.MEMBER: "group_id",
    EntityClass.SESSION: "group_id",
    EntityClass.HISTORY: "session_id",
}

PARTITION_ORDERS: Dict[EntityClass, RemoteOrder] = {
    EntityClass.PROFILE: RemoteOrder("full_name"),
    EntityClass.GROUP: RemoteOrder("created_at"),
    EntityClass.MEMBER: RemoteOrder("joined_at"),
    EntityClass.SESSION: RemoteOrder("created_at", descending=True),
    EntityClass.HISTORY: RemoteOrder("created_at", descending=True),
}


class UserRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    MEMBER = "member"
    SUPERVISOR = "supervisor"


DEFAULT_USER_ROLE = UserRole.MEMBER


class MemberRole(str, Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class SessionStatus(str, Enum):
    OPEN = "open"
    PENDING = "pending"
    CLOSED = "closed"


CHECKIN_ACTION = "checkin"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", use_enum_values=False)


class Organization(_Record):
    id: str
    name: str
    bio: Optional[str] = None
    address_street: Optional[str] = None
    address_number: Optional[str] = None
    address_complement: Optional[str] = None
    address_neighborhood: Optional[str] = None
    address_city: Optional[str] = None
    address_state: Optional[str] = None
    address_cep: Optional[str] = None
    logo_url: Optional[str] = None
    logo_path: Optional[str] = None
    created_at: datetime = Field(default_factory=_now)


class ProfileSummary(_Record):
    id: str
    username: Optional[str] = None
    full_name: Optional[str] = None


class Profile(_Record):
    id: str
    username: str
    full_name: str
    role: UserRole = DEFAULT_USER_ROLE
    organization_id: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    mode: Optional[str] = None
    created_at: datetime = Field(default_factory=_now)


class Group(_Record):
    id: str
    name: str
    code: str
    owner_id: str
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=_now)


class GroupMembership(_Record):
    """A group seen through the actor's own membership row."""

    role: MemberRole
    joined_at: datetime
    group: Group


class GroupMember(_Record):
    id: str
    profile_id: str
    group_id: str
    role: MemberRole = MemberRole.MEMBER
    joined_at: datetime = Field(default_factory=_now)
    profile: Optional[ProfileSummary] = None
    score: int = 0


class Session(_Record):
    id: str
    name: str
    group_id: str
    delay: int = 0
    status: SessionStatus = SessionStatus.OPEN
    description: Optional[str] = None
    status_changed_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class SessionHistoryEntry(_Record):
    id: str
    session_id: str
    member_id: str
    by_profile_id: str
    action: str
    score: int = 0
    action_description: Optional[str] = None
    created_at: datetime = Field(default_factory=_now)
    member_profile: Optional[ProfileSummary] = None
    by_profile: Optional[ProfileSummary] = None

    @property
    def is_checkin(self) -> bool:
        return self.action == CHECKIN_ACTION


ENTITY_MODELS: Dict[EntityClass, type[_Record]] = {
    EntityClass.ORGANIZATION: Organization,
    EntityClass.PROFILE: Profile,
    EntityClass.GROUP: Group,
    EntityClass.MEMBER: GroupMember,
    EntityClass.SESSION: Session,
    EntityClass.HISTORY: SessionHistoryEntry,
}


class _Payload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class _UpdatePayload(BaseModel):
    model_config = ConfigDict(extra="forbid")

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


class GroupCreate(_Payload):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    code: Optional[str] = None
    owner_id: Optional[str] = None


class GroupUpdate(_UpdatePayload):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    code: Optional[str] = None


class SessionCreate(_Payload):
    name: str = Field(min_length=1)
    group_id: str
    delay: int = Field(default=0, ge=0)
    description: Optional[str] = None


class SessionUpdate(_UpdatePayload):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    delay: Optional[int] = Field(default=None, ge=0)
    status: Optional[SessionStatus] = None


class OrganizationCreate(_Payload):
    name: str = Field(min_length=1)
    bio: Optional[str] = None
    address_street: Optional[str] = None
    address_number: Optional[str] = None
    address_complement: Optional[str] = None
    address_neighborhood: Optional[str] = None
    address_city: Optional[str] = None
    address_state: Optional[str] = None
    address_cep: Optional[str] = None


class OrganizationUpdate(_UpdatePayload):
    name: Optional[str] = Field(default=None, min_length=1)
    bio: Optional[str] = None
    address_street: Optional[str] = None
    address_number: Optional[str] = None
    address_complement: Optional[str] = None
    address_neighborhood: Optional[str] = None
    address_city: Optional[str] = None
    address_state: Optional[str] = None
    address_cep: Optional[str] = None


class ProfileCreate(_Payload):
    id: str
    username: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    role: UserRole = DEFAULT_USER_ROLE
    organization_id: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileUpdate(_UpdatePayload):
    username: Optional[str] = Field(default=None, min_length=1)
    full_name: Optional[str] = Field(default=None, min_length=1)
    organization_id: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    mode: Optional[str] = None


class HistoryEntryCreate(_Payload):
    session_id: str
    member_id: str
    action: str = Field(min_length=1)
    action_description: Optional[str] = None
    score: int = 0


AssignableRole = Literal["admin", "member"]


__all__ = [
    "AssignableRole",
    "CHECKIN_ACTION",
    "DEFAULT_USER_ROLE",
    "ENTITY_MODELS",
    "EntityClass",
    "Group",
    "GroupCreate",
    "GroupMember",
    "GroupMembership",
    "GroupUpdate",
    "HistoryEntryCreate",
    "MemberRole",
    "Organization",
    "OrganizationCreate",
    "OrganizationUpdate",
    "PARTITION_COLUMNS",
    "PARTITION_ORDERS",
    "Profile",
    "ProfileCreate",
    "ProfileSummary",
    "ProfileUpdate",
    "RemoteOrder",
    "Session",
    "SessionCreate",
    "SessionHistoryEntry",
    "SessionStatus",
    "SessionUpdate",
    "UserRole",
]
