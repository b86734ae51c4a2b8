from __future__ import annotations

import logging
from typing import List, Optional

from ..cache.domain import DomainCache
from ..models import (
    PARTITION_ORDERS,
    EntityClass,
    Organization,
    OrganizationCreate,
    OrganizationUpdate,
    Profile,
)
from ..remote.base import RemoteSource, parse_row, parse_rows
from .base import BaseRepository

logger = logging.getLogger(__name__)


class OrganizationsRepository(BaseRepository[Organization]):
    def __init__(self, cache: DomainCache, source: RemoteSource) -> None:
        super().__init__(cache.organizations, source)
        self._organizations = cache.organizations

    def get_organization(self, organization_id: str) -> Optional[Organization]:
        return self._organizations.get(organization_id)

    async def fetch_organization(self, organization_id: str) -> Optional[Organization]:
        cached = self._organizations.get(organization_id)
        if cached is not None:
            return cached
        with self._reading(f"fetch organization {organization_id}"):
            return await self._load(organization_id)
        return None

    async def fetch_user_organization(self, user_id: Optional[str] = None) -> Optional[Organization]:
        """The organization referenced by the user's profile, if any."""
        with self._reading("fetch user organization"):
            profile_id = await self._actor_id(user_id)
            profile: Profile = parse_row(EntityClass.PROFILE, await self._source.fetch_by_id(EntityClass.PROFILE, profile_id))
            if not profile.organization_id:
                return None
            return await self._load(profile.organization_id)
        return None

    async def fetch_organization_members(self, organization_id: str) -> List[Profile]:
        # Not cached; the profiles repository owns the organization partitions.
        with self._reading(f"fetch members of organization {organization_id}"):
            rows = await self._source.find(
                EntityClass.PROFILE,
                {"organization_id": organization_id},
                order=PARTITION_ORDERS[EntityClass.PROFILE],
            )
            return parse_rows(EntityClass.PROFILE, rows)
        return []

    async def create_organization(self, data: OrganizationCreate) -> Organization:
        with self._mutating("create organization"):
            row = await self._source.create(EntityClass.ORGANIZATION, data.to_row())
            organization: Organization = parse_row(EntityClass.ORGANIZATION, row)
            self._organizations.put(organization)
            return organization

    async def update_organization(self, organization_id: str, data: OrganizationUpdate) -> Organization:
        with self._mutating(f"update organization {organization_id}"):
            row = await self._source.update(EntityClass.ORGANIZATION, organization_id, data.to_row())
            organization: Organization = parse_row(EntityClass.ORGANIZATION, row)
            self._organizations.put(organization)
            return organization

    async def delete_organization(self, organization_id: str) -> bool:
        with self._mutating(f"delete organization {organization_id}"):
            await self._source.delete(EntityClass.ORGANIZATION, organization_id)
            self._organizations.remove(organization_id)
            return True

    async def refresh_organization(self, organization_id: str) -> Optional[Organization]:
        self._organizations.remove(organization_id)
        return await self.fetch_organization(organization_id)

    async def _load(self, organization_id: str) -> Organization:
        row = await self._source.fetch_by_id(EntityClass.ORGANIZATION, organization_id)
        organization: Organization = parse_row(EntityClass.ORGANIZATION, row)
        self._organizations.put(organization)
        return organization


__all__ = ["OrganizationsRepository"]
