"""Profile cache: the signed-in user's profile is held apart from everyone else's."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Union

from ..models import EntityClass, Profile
from .stores import PartitionedStore


@dataclass(frozen=True)
class MineProfile:
    profile: Profile


@dataclass(frozen=True)
class OtherProfile:
    profile: Profile


ProfileEntry = Union[MineProfile, OtherProfile]


class ProfileStore(PartitionedStore[Profile]):
    """Other profiles partitioned by organization, plus the distinguished "mine" slot.

    ``clear_others`` never touches the "mine" slot; only ``clear`` (identity
    level) does.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        super().__init__(
            EntityClass.PROFILE,
            parent_of=lambda profile: profile.organization_id,
            ttl=None,
            clock=clock,
        )
        self._mine: Optional[Profile] = None

    @property
    def mine(self) -> Optional[Profile]:
        return self._mine

    def set_mine(self, profile: Profile) -> None:
        self._mine = profile

    def clear_mine(self) -> None:
        self._mine = None

    def lookup(self, profile_id: Optional[str]) -> Optional[ProfileEntry]:
        if not profile_id:
            return None
        if self._mine is not None and self._mine.id == profile_id:
            return MineProfile(self._mine)
        other = self.items.get(profile_id)
        return OtherProfile(other) if other is not None else None

    def get(self, profile_id: Optional[str]) -> Optional[Profile]:
        entry = self.lookup(profile_id)
        return entry.profile if entry is not None else None

    def get_many(self, profile_ids: Iterable[str]) -> List[Profile]:
        found: List[Profile] = []
        for profile_id in profile_ids:
            profile = self.get(profile_id)
            if profile is not None:
                found.append(profile)
        return found

    def get_by_username(self, username: Optional[str]) -> Optional[Profile]:
        if not username:
            return None
        if self._mine is not None and self._mine.username == username:
            return self._mine
        for profile in self.items.values():
            if profile.username == username:
                return profile
        return None

    def put(self, profile: Profile) -> None:
        super().put(profile)
        if self._mine is not None and self._mine.id == profile.id:
            self._mine = profile

    def replace_partition(self, parent_key: str, values: List[Profile]) -> List[Profile]:
        replaced = super().replace_partition(parent_key, values)
        if self._mine is not None:
            for profile in values:
                if profile.id == self._mine.id:
                    self._mine = profile
        return replaced

    def clear_others(self) -> None:
        super().clear()

    def clear(self) -> None:
        super().clear()
        self._mine = None


__all__ = ["MineProfile", "OtherProfile", "ProfileEntry", "ProfileStore"]
