"""Profiles: the signed-in user's own plus everyone else's, by organization."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from ..cache.domain import DomainCache
from ..cache.policy import ExecutionContext
from ..models import PARTITION_ORDERS, EntityClass, Profile, ProfileCreate, ProfileUpdate
from ..remote.base import RemoteSource, parse_row, parse_rows
from .base import BaseRepository
from .orchestrator import FetchOrchestrator

logger = logging.getLogger(__name__)


class ProfilesRepository(BaseRepository[Profile]):
    def __init__(self, cache: DomainCache, source: RemoteSource, context: ExecutionContext) -> None:
        super().__init__(cache.profiles, source)
        self._profiles = cache.profiles
        self._by_organization: FetchOrchestrator[Profile] = FetchOrchestrator(
            EntityClass.PROFILE, cache.profiles, source, context
        )

    @property
    def my_profile(self) -> Optional[Profile]:
        return self._profiles.mine

    def get_profile(self, profile_id: str) -> Optional[Profile]:
        return self._profiles.get(profile_id)

    def get_profile_by_username(self, username: str) -> Optional[Profile]:
        return self._profiles.get_by_username(username)

    async def fetch_my_profile(self, user_id: Optional[str] = None) -> Profile:
        """Load the actor's profile into the "mine" slot.

        Unlike other reads this propagates failures, including
        :class:`~rollcall.errors.Unauthenticated` when nobody is signed in.
        """
        with self._mutating("fetch my profile"):
            actor_id = await self._actor_id(user_id)
            mine = self._profiles.mine
            if mine is not None and mine.id == actor_id:
                return mine
            row = await self._source.fetch_by_id(EntityClass.PROFILE, actor_id)
            profile: Profile = parse_row(EntityClass.PROFILE, row)
            self._profiles.set_mine(profile)
            return profile

    async def fetch_profile(self, profile_id: str) -> Optional[Profile]:
        cached = self._profiles.get(profile_id)
        if cached is not None:
            return cached
        with self._reading(f"fetch profile {profile_id}"):
            return await self._load(profile_id)
        return None

    async def fetch_profile_by_username(self, username: str) -> Optional[Profile]:
        cached = self._profiles.get_by_username(username)
        if cached is not None:
            return cached
        with self._reading(f"fetch profile by username {username}"):
            rows = await self._source.find(EntityClass.PROFILE, {"username": username}, limit=1)
            if not rows:
                return None
            profile: Profile = parse_row(EntityClass.PROFILE, rows[0])
            self._profiles.put(profile)
            return profile
        return None

    async def fetch_profiles(self) -> List[Profile]:
        with self._reading("fetch profiles"):
            rows = await self._source.find(EntityClass.PROFILE, {}, order=PARTITION_ORDERS[EntityClass.PROFILE])
            profiles: List[Profile] = parse_rows(EntityClass.PROFILE, rows)
            self._profiles.put_many(profiles)
            return profiles
        return []

    async def fetch_profiles_by_ids(self, profile_ids: Sequence[str]) -> List[Profile]:
        """Resolve many profiles, asking the remote source only for the missing ones."""
        if not profile_ids:
            return []
        cached = self._profiles.get_many(profile_ids)
        known = {profile.id for profile in cached}
        missing = [profile_id for profile_id in dict.fromkeys(profile_ids) if profile_id not in known]
        if not missing:
            return cached
        with self._reading(f"fetch {len(missing)} profiles"):
            rows = await self._source.find(EntityClass.PROFILE, {"id": missing})
            self._profiles.put_many(parse_rows(EntityClass.PROFILE, rows))
            return self._profiles.get_many(profile_ids)
        return cached

    async def fetch_profiles_by_organization(self, organization_id: str, force_refresh: bool = False) -> List[Profile]:
        with self._reading(f"fetch profiles of organization {organization_id}"):
            return await self._by_organization.read(organization_id, force=force_refresh)
        return []

    async def create_profile(self, data: ProfileCreate) -> Profile:
        with self._mutating("create profile"):
            row = await self._source.create(EntityClass.PROFILE, data.to_row())
            profile: Profile = parse_row(EntityClass.PROFILE, row)
            self._profiles.put(profile)
            return profile

    async def update_profile(self, profile_id: str, data: ProfileUpdate) -> Profile:
        with self._mutating(f"update profile {profile_id}"):
            row = await self._source.update(EntityClass.PROFILE, profile_id, data.to_row())
            profile: Profile = parse_row(EntityClass.PROFILE, row)
            self._profiles.put(profile)
            return profile

    async def update_current_user_profile(self, data: ProfileUpdate, user_id: Optional[str] = None) -> Profile:
        with self._mutating("resolve current user"):
            actor_id = await self._actor_id(user_id)
        return await self.update_profile(actor_id, data)

    async def delete_profile(self, profile_id: str) -> bool:
        with self._mutating(f"delete profile {profile_id}"):
            await self._source.delete(EntityClass.PROFILE, profile_id)
            self._profiles.remove(profile_id)
            return True

    async def refresh_profile(self, profile_id: str) -> Optional[Profile]:
        self._profiles.remove(profile_id)
        with self._reading(f"refresh profile {profile_id}"):
            return await self._load(profile_id)
        return None

    async def _load(self, profile_id: str) -> Profile:
        row = await self._source.fetch_by_id(EntityClass.PROFILE, profile_id)
        profile: Profile = parse_row(EntityClass.PROFILE, row)
        self._profiles.put(profile)
        return profile


__all__ = ["ProfilesRepository"]
