"""Reacting to sign-in and sign-out."""

from __future__ import annotations

import logging
from typing import List

from ..errors import RollcallError
from ..models import GroupMembership
from .cascade import CascadeInvalidator
from .groups import GroupsRepository
from .profiles import ProfilesRepository

logger = logging.getLogger(__name__)


class IdentityService:
    def __init__(
        self,
        cascade: CascadeInvalidator,
        profiles: ProfilesRepository,
        groups: GroupsRepository,
    ) -> None:
        self._cascade = cascade
        self._profiles = profiles
        self._groups = groups

    async def on_login(self, actor_id: str) -> List[GroupMembership]:
        """Load the new actor's profile, drop the previous actor's groups and refetch."""
        try:
            await self._profiles.fetch_my_profile(actor_id)
        except RollcallError as exc:
            logger.warning("Unable to synchronize profile for %s after sign-in: %s", actor_id, exc)

        self._cascade.login()
        memberships = await self._groups.fetch_user_groups(actor_id)
        if self._groups.error:
            logger.warning("Unable to load groups for %s after sign-in: %s", actor_id, self._groups.error)
        return memberships

    def on_logout(self) -> None:
        self._cascade.logout()


__all__ = ["IdentityService"]
