"""Group membership with per-member scores."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import anyio

from ..cache.domain import DomainCache
from ..cache.policy import ExecutionContext
from ..errors import MemberNotFound, PermissionDenied, RollcallError
from ..models import AssignableRole, EntityClass, GroupMember, MemberRole, Session, SessionHistoryEntry
from ..remote.base import RemoteSource, parse_row, parse_rows
from ..scores import ScoreAggregator
from .base import BaseRepository
from .cascade import CascadeInvalidator
from .orchestrator import FetchOrchestrator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MemberPermissions:
    is_owner: bool
    is_admin_or_owner: bool

    @property
    def can_remove_members(self) -> bool:
        return self.is_admin_or_owner

    @property
    def can_update_roles(self) -> bool:
        return self.is_owner


class MembersRepository(BaseRepository[GroupMember]):
    def __init__(
        self,
        cache: DomainCache,
        source: RemoteSource,
        context: ExecutionContext,
        cascade: CascadeInvalidator,
    ) -> None:
        super().__init__(cache.members, source)
        self._members = cache.members
        self._cascade = cascade
        self._orchestrator: FetchOrchestrator[GroupMember] = FetchOrchestrator(
            EntityClass.MEMBER, cache.members, source, context, load=self._load_members
        )

    def get_member(self, member_id: str) -> Optional[GroupMember]:
        return self._members.get(member_id)

    def get_members_by_group(self, group_id: str) -> List[GroupMember]:
        return self._members.list_partition(group_id)

    def get_member_by_profile(self, group_id: str, profile_id: str) -> Optional[GroupMember]:
        return self._members.get_member_by_profile(group_id, profile_id)

    def check_user_permissions(self, group_id: str, profile_id: str) -> MemberPermissions:
        """Answered from cached members only; fetch the group's members first."""
        return MemberPermissions(
            is_owner=self._members.is_user_owner(group_id, profile_id),
            is_admin_or_owner=self._members.is_user_admin_or_owner(group_id, profile_id),
        )

    async def fetch_group_members(self, group_id: str, force_refresh: bool = False) -> List[GroupMember]:
        with self._reading(f"fetch members of group {group_id}"):
            return await self._orchestrator.read(group_id, force=force_refresh)
        return []

    async def fetch_member(self, group_id: str, profile_id: str) -> Optional[GroupMember]:
        with self._reading(f"fetch member {profile_id} of group {group_id}"):
            member = await self._remote_member(group_id, profile_id)
            if member is None:
                return None
            session_ids = await self._group_session_ids(group_id)
            member = member.model_copy(update={"score": await self._member_score(member.profile_id, session_ids)})
            self._members.put(member)
            return member
        return None

    async def remove_member(self, group_id: str, profile_id: str) -> bool:
        with self._mutating(f"remove member {profile_id} from group {group_id}"):
            member = self._members.get_member_by_profile(group_id, profile_id)
            if member is None:
                raise MemberNotFound(f"Member {profile_id} is not part of group {group_id}")
            actor_id = await self._source.current_actor_id()
            actor = await self._remote_member(group_id, actor_id)
            if actor is None or actor.role not in (MemberRole.OWNER, MemberRole.ADMIN):
                raise PermissionDenied("You do not have permission to remove members from this group")
            target = await self._remote_member(group_id, profile_id)
            if target is not None and target.role is MemberRole.OWNER:
                raise PermissionDenied("The group owner cannot be removed")
            await self._source.delete(EntityClass.MEMBER, member.id)
            self._members.remove(member.id)
            return True

    async def update_member_role(self, group_id: str, profile_id: str, role: AssignableRole) -> bool:
        with self._mutating(f"update role of member {profile_id} in group {group_id}"):
            new_role = MemberRole(role)
            if new_role is MemberRole.OWNER:
                raise PermissionDenied("Ownership cannot be assigned through a role change")
            actor_id = await self._source.current_actor_id()
            actor = await self._remote_member(group_id, actor_id)
            if actor is None or actor.role is not MemberRole.OWNER:
                raise PermissionDenied("Only the group owner can change member roles")
            target = await self._remote_member(group_id, profile_id)
            if target is None:
                raise MemberNotFound(f"Member {profile_id} is not part of group {group_id}")
            if target.role is MemberRole.OWNER:
                raise PermissionDenied("The owner's role cannot be changed")
            await self._source.update(EntityClass.MEMBER, target.id, {"role": new_role.value})
            cached = self._members.get_member_by_profile(group_id, profile_id)
            if cached is not None:
                self._members.patch(cached.id, {"role": new_role})
            return True

    async def refresh_group_members(self, group_id: str) -> List[GroupMember]:
        self._cascade.invalidate(EntityClass.MEMBER, group_id, reason="refresh")
        return await self.fetch_group_members(group_id, force_refresh=True)

    async def _load_members(self, group_id: str) -> List[GroupMember]:
        rows = await self._source.fetch_by_parent(EntityClass.MEMBER, group_id)
        members: List[GroupMember] = parse_rows(EntityClass.MEMBER, rows)
        if not members:
            return []
        session_ids = await self._group_session_ids(group_id)
        # One history query per member; totals are recomputed on every fetch.
        scores: Dict[str, int] = {}

        async def _score(member: GroupMember) -> None:
            scores[member.id] = await self._member_score(member.profile_id, session_ids)

        async with anyio.create_task_group() as group:
            for member in members:
                group.start_soon(_score, member)
        return [member.model_copy(update={"score": scores[member.id]}) for member in members]

    async def _group_session_ids(self, group_id: str) -> List[str]:
        rows = await self._source.find(EntityClass.SESSION, {"group_id": group_id})
        sessions: List[Session] = parse_rows(EntityClass.SESSION, rows)
        return [session.id for session in sessions]

    async def _member_score(self, profile_id: str, session_ids: Sequence[str]) -> int:
        if not session_ids:
            return 0
        try:
            rows = await self._source.find(
                EntityClass.HISTORY, {"member_id": profile_id, "session_id": list(session_ids)}
            )
            entries: List[SessionHistoryEntry] = parse_rows(EntityClass.HISTORY, rows)
        except RollcallError as exc:
            logger.warning("Failed to compute score for member %s: %s", profile_id, exc)
            return 0
        return ScoreAggregator.total(entries, profile_id)

    async def _remote_member(self, group_id: str, profile_id: str) -> Optional[GroupMember]:
        rows = await self._source.find(
            EntityClass.MEMBER, {"group_id": group_id, "profile_id": profile_id}, limit=1
        )
        if not rows:
            return None
        return parse_row(EntityClass.MEMBER, rows[0])


__all__ = ["MemberPermissions", "MembersRepository"]
