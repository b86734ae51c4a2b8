from __future__ import annotations

import pytest

from rollcall.cache.profiles import MineProfile, OtherProfile
from rollcall.errors import Unauthenticated
from rollcall.models import EntityClass, ProfileUpdate


@pytest.mark.anyio
async def test_my_profile_is_held_apart_from_others(client) -> None:
    mine = await client.profiles.fetch_my_profile()
    await client.profiles.fetch_profile("profile-member")

    assert mine.id == "profile-owner"
    assert isinstance(client.cache.profiles.lookup("profile-owner"), MineProfile)
    assert isinstance(client.cache.profiles.lookup("profile-member"), OtherProfile)

    client.cache.profiles.clear_others()

    assert client.profiles.my_profile == mine
    assert client.profiles.get_profile("profile-member") is None


@pytest.mark.anyio
async def test_my_profile_is_served_from_cache_once_loaded(client, source) -> None:
    await client.profiles.fetch_my_profile()
    await client.profiles.fetch_my_profile()

    assert source.count("fetch_by_id", EntityClass.PROFILE) == 1


@pytest.mark.anyio
async def test_my_profile_requires_an_actor(client, source) -> None:
    source.sign_out()

    with pytest.raises(Unauthenticated):
        await client.profiles.fetch_my_profile()

    assert client.profiles.error == "User not authenticated"


@pytest.mark.anyio
async def test_fetch_profiles_by_ids_only_asks_for_missing(client, source) -> None:
    await client.profiles.fetch_profile("profile-admin")

    profiles = await client.profiles.fetch_profiles_by_ids(["profile-member", "profile-admin"])

    assert [profile.id for profile in profiles] == ["profile-member", "profile-admin"]
    requested = [call for call in source.calls if call[0] == "find" and call[1] is EntityClass.PROFILE]
    assert requested == [("find", EntityClass.PROFILE, {"id": ["profile-member"]})]

    await client.profiles.fetch_profiles_by_ids(["profile-member", "profile-admin"])
    assert source.count("find", EntityClass.PROFILE) == 1


@pytest.mark.anyio
async def test_profiles_by_organization_sorted_by_name(server_client, source) -> None:
    profiles = await server_client.profiles.fetch_profiles_by_organization("org-1")
    again = await server_client.profiles.fetch_profiles_by_organization("org-1")

    assert [profile.full_name for profile in profiles] == [
        "Adam Admin",
        "Mia Member",
        "Olivia Owner",
        "Otto Outsider",
    ]
    assert again == profiles
    assert source.count("fetch_by_parent", EntityClass.PROFILE) == 1

    await server_client.profiles.fetch_profiles_by_organization("org-1", force_refresh=True)
    assert source.count("fetch_by_parent", EntityClass.PROFILE) == 2


@pytest.mark.anyio
async def test_lookup_by_username(client, source) -> None:
    profile = await client.profiles.fetch_profile_by_username("mia")
    cached = await client.profiles.fetch_profile_by_username("mia")

    assert profile is not None and profile.id == "profile-member"
    assert cached == profile
    assert source.count("find", EntityClass.PROFILE) == 1
    assert await client.profiles.fetch_profile_by_username("nobody") is None


@pytest.mark.anyio
async def test_updating_own_profile_refreshes_mine(client) -> None:
    await client.profiles.fetch_my_profile()

    updated = await client.profiles.update_current_user_profile(ProfileUpdate(full_name="Olivia O."))

    assert updated.full_name == "Olivia O."
    assert client.profiles.my_profile.full_name == "Olivia O."


@pytest.mark.anyio
async def test_organization_fetch_refreshes_mine(client, source) -> None:
    await client.profiles.fetch_my_profile()
    source.tables[EntityClass.PROFILE]["profile-owner"]["full_name"] = "Olivia O."

    await client.profiles.fetch_profiles_by_organization("org-1")

    assert client.profiles.my_profile.full_name == "Olivia O."
    assert client.profiles.get_profile("profile-owner").full_name == "Olivia O."

@pytest.mark.anyio
async def test_refresh_profile_bypasses_cache(client, source) -> None:
    await client.profiles.fetch_profile("profile-member")
    source.tables[EntityClass.PROFILE]["profile-member"]["full_name"] = "Mia M."

    refreshed = await client.profiles.refresh_profile("profile-member")

    assert refreshed is not None and refreshed.full_name == "Mia M."
    assert source.count("fetch_by_id", EntityClass.PROFILE) == 2
