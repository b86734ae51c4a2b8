"""Groups the actor owns or belongs to."""

from __future__ import annotations

import logging
from typing import List, Optional

from ..cache.domain import DomainCache
from ..codes import generate_group_code
from ..errors import NotFound, PermissionDenied, Unauthenticated, ValidationFailed
from ..models import (
    EntityClass,
    Group,
    GroupCreate,
    GroupMember,
    GroupMembership,
    GroupUpdate,
    MemberRole,
    RemoteOrder,
)
from ..remote.base import RemoteSource, parse_row, parse_rows
from .base import BaseRepository
from .cascade import CascadeInvalidator

logger = logging.getLogger(__name__)


class GroupsRepository(BaseRepository[Group]):
    def __init__(self, cache: DomainCache, source: RemoteSource, cascade: CascadeInvalidator) -> None:
        super().__init__(cache.groups, source)
        self._cache = cache
        self._groups = cache.groups
        self._cascade = cascade

    def get_group(self, group_id: str) -> Optional[Group]:
        return self._groups.get(group_id)

    def get_user_groups(self, owner_id: str) -> List[Group]:
        return self._groups.list_partition(owner_id)

    async def fetch_user_groups(self, user_id: Optional[str] = None) -> List[GroupMembership]:
        """Every group the actor is a member of, joined with the membership row."""
        with self._reading("fetch user groups"):
            actor_id = await self._actor_id(user_id)
            rows = await self._source.find(
                EntityClass.MEMBER, {"profile_id": actor_id}, order=RemoteOrder("joined_at")
            )
            memberships: List[GroupMember] = parse_rows(EntityClass.MEMBER, rows)
            if not memberships:
                return []
            group_rows = await self._source.find(
                EntityClass.GROUP, {"id": [membership.group_id for membership in memberships]}
            )
            groups: List[Group] = parse_rows(EntityClass.GROUP, group_rows)
            self._groups.put_many(groups)
            by_id = {group.id: group for group in groups}
            return [
                GroupMembership(role=membership.role, joined_at=membership.joined_at, group=by_id[membership.group_id])
                for membership in memberships
                if membership.group_id in by_id
            ]
        return []

    async def fetch_group(self, group_id: str) -> Optional[Group]:
        cached = self._groups.get(group_id)
        if cached is not None:
            return cached
        with self._reading(f"fetch group {group_id}"):
            return await self._load_group(group_id)
        return None

    async def fetch_group_by_code(self, code: str) -> Optional[Group]:
        with self._reading(f"fetch group by code {code}"):
            rows = await self._source.find(EntityClass.GROUP, {"code": code.upper()}, limit=1)
            if not rows:
                raise NotFound(f"No group uses the code {code}")
            group: Group = parse_row(EntityClass.GROUP, rows[0])
            self._groups.put(group)
            return group
        return None

    async def create_group(self, data: GroupCreate) -> Group:
        with self._mutating("create group"):
            payload = data.to_row()
            payload["owner_id"] = await self._actor_id(data.owner_id)
            payload.setdefault("code", generate_group_code())
            row = await self._source.create(EntityClass.GROUP, payload)
            group: Group = parse_row(EntityClass.GROUP, row)
            self._groups.put(group)
            logger.info("Created group %s with code %s", group.id, group.code)
            return group

    async def update_group(self, group_id: str, data: GroupUpdate) -> Group:
        with self._mutating(f"update group {group_id}"):
            await self._require_owner(group_id)
            row = await self._source.update(EntityClass.GROUP, group_id, data.to_row())
            group: Group = parse_row(EntityClass.GROUP, row)
            self._groups.put(group)
            return group

    async def delete_group(self, group_id: str) -> bool:
        with self._mutating(f"delete group {group_id}"):
            await self._require_owner(group_id)
            await self._source.delete(EntityClass.GROUP, group_id)
            self._cascade.group_deleted(group_id)
            return True

    async def join_group(self, group_id: str, profile_id: Optional[str] = None) -> GroupMembership:
        with self._mutating(f"join group {group_id}"):
            member_id = await self._actor_id(profile_id)
            existing = await self._source.find(
                EntityClass.MEMBER, {"group_id": group_id, "profile_id": member_id}, limit=1
            )
            if existing:
                raise ValidationFailed("You are already a member of this group")
            row = await self._source.create(
                EntityClass.MEMBER,
                {"group_id": group_id, "profile_id": member_id, "role": MemberRole.MEMBER.value},
            )
            member: GroupMember = parse_row(EntityClass.MEMBER, row)
            self._cache.members.put(member)
            group = self._groups.get(group_id) or await self._load_group(group_id)
            return GroupMembership(role=member.role, joined_at=member.joined_at, group=group)

    async def refresh_user_groups(self, user_id: Optional[str] = None) -> List[GroupMembership]:
        try:
            owner_id = await self._actor_id(user_id)
        except Unauthenticated:
            owner_id = None
        if owner_id:
            self._cascade.invalidate(EntityClass.GROUP, owner_id, reason="refresh")
        return await self.fetch_user_groups(user_id)

    async def refresh_group(self, group_id: str) -> Optional[Group]:
        self._groups.remove(group_id)
        return await self.fetch_group(group_id)

    async def _load_group(self, group_id: str) -> Group:
        row = await self._source.fetch_by_id(EntityClass.GROUP, group_id)
        group: Group = parse_row(EntityClass.GROUP, row)
        self._groups.put(group)
        return group

    async def _require_owner(self, group_id: str) -> Group:
        actor_id = await self._source.current_actor_id()
        group = self._groups.get(group_id) or await self._load_group(group_id)
        if group.owner_id != actor_id:
            raise PermissionDenied("Only the group owner can change this group")
        return group


__all__ = ["GroupsRepository"]
