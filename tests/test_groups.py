from __future__ import annotations

import re

import pytest

from rollcall.errors import PermissionDenied, ValidationFailed
from rollcall.models import EntityClass, GroupCreate, GroupUpdate, MemberRole


@pytest.mark.anyio
async def test_user_groups_join_membership_rows(client, source) -> None:
    source.sign_in("profile-member")

    memberships = await client.groups.fetch_user_groups()

    assert len(memberships) == 1
    assert memberships[0].role is MemberRole.MEMBER
    assert memberships[0].group.name == "Morning Runners"
    assert client.groups.get_group("group-1") is not None
    assert [group.id for group in client.groups.get_user_groups("profile-owner")] == ["group-1"]


@pytest.mark.anyio
async def test_user_without_groups(client, source) -> None:
    source.sign_in("profile-outsider")

    assert await client.groups.fetch_user_groups() == []
    assert source.count("find", EntityClass.GROUP) == 0


@pytest.mark.anyio
async def test_create_group_generates_join_code(client) -> None:
    group = await client.groups.create_group(GroupCreate(name="Evening Swimmers"))

    assert group.owner_id == "profile-owner"
    assert re.fullmatch(r"[A-Z]{8}", group.code)
    assert client.groups.get_group(group.id) == group


@pytest.mark.anyio
async def test_only_owner_updates_or_deletes_group(client, source) -> None:
    source.sign_in("profile-admin")

    with pytest.raises(PermissionDenied):
        await client.groups.update_group("group-1", GroupUpdate(name="Hijacked"))
    with pytest.raises(PermissionDenied):
        await client.groups.delete_group("group-1")

    assert source.tables[EntityClass.GROUP]["group-1"]["name"] == "Morning Runners"

    source.sign_in("profile-owner")
    renamed = await client.groups.update_group("group-1", GroupUpdate(name="Dawn Runners"))

    assert renamed.name == "Dawn Runners"
    assert client.groups.get_group("group-1").name == "Dawn Runners"

    assert await client.groups.delete_group("group-1")
    assert client.groups.get_group("group-1") is None


@pytest.mark.anyio
async def test_join_group_by_code(client, source) -> None:
    source.sign_in("profile-outsider")

    group = await client.groups.fetch_group_by_code("runnersa")
    membership = await client.groups.join_group(group.id)

    assert membership.group.id == "group-1"
    assert membership.role is MemberRole.MEMBER

    with pytest.raises(ValidationFailed):
        await client.groups.join_group(group.id)

    assert source.count("create", EntityClass.MEMBER) == 1


@pytest.mark.anyio
async def test_unknown_code_records_error(client) -> None:
    assert await client.groups.fetch_group_by_code("ZZZZZZZZ") is None
    assert client.groups.error == "No group uses the code ZZZZZZZZ"


@pytest.mark.anyio
async def test_point_read_is_cached_and_refresh_refetches(client, source) -> None:
    await client.groups.fetch_group("group-1")
    await client.groups.fetch_group("group-1")
    assert source.count("fetch_by_id", EntityClass.GROUP) == 1

    await client.groups.refresh_group("group-1")
    assert source.count("fetch_by_id", EntityClass.GROUP) == 2
