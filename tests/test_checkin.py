from __future__ import annotations

import pytest

from rollcall.errors import DuplicateCheckin, SessionNotFound, SessionNotOpen, Unauthenticated
from rollcall.models import EntityClass


@pytest.mark.anyio
async def test_checkin_records_entry_with_default_score(client, source, events) -> None:
    entry = await client.history.perform_checkin("session-open")

    assert entry.member_id == "profile-owner"
    assert entry.by_profile_id == "profile-owner"
    assert entry.action == "checkin"
    assert entry.score == 100
    assert client.history.get_history_by_session("session-open")[0].id == entry.id
    assert client.history.has_checked_in("session-open", "profile-owner")
    assert not client.history.can_checkin("session-open", "profile-owner")
    recorded = [event for event in events if event.name == "checkin_recorded"]
    assert recorded[0].payload == {
        "session_id": "session-open",
        "member_id": "profile-owner",
        "by_profile_id": "profile-owner",
        "score": 100,
    }


@pytest.mark.anyio
async def test_checkin_on_behalf_of_member(client) -> None:
    entry = await client.history.perform_checkin("session-open", member_id="profile-member")

    assert entry.member_id == "profile-member"
    assert entry.by_profile_id == "profile-owner"
    assert entry.member_profile is not None and entry.member_profile.username == "mia"


@pytest.mark.anyio
async def test_second_checkin_is_rejected(client, source) -> None:
    await client.history.perform_checkin("session-open", member_id="profile-member")

    with pytest.raises(DuplicateCheckin):
        await client.history.perform_checkin("session-open", member_id="profile-member")

    assert source.count("create", EntityClass.HISTORY) == 1
    assert client.history.error is not None


@pytest.mark.anyio
async def test_checkin_known_only_remotely_is_rejected(client, source) -> None:
    source.seed(
        EntityClass.HISTORY,
        session_id="session-open",
        member_id="profile-member",
        by_profile_id="profile-admin",
        action="checkin",
        score=100,
    )

    with pytest.raises(DuplicateCheckin):
        await client.history.perform_checkin("session-open", member_id="profile-member")

    assert source.count("create", EntityClass.HISTORY) == 0


@pytest.mark.anyio
@pytest.mark.parametrize("status", ["pending", "closed"])
async def test_checkin_requires_open_session(client, source, status) -> None:
    source.tables[EntityClass.SESSION]["session-open"]["status"] = status

    with pytest.raises(SessionNotOpen):
        await client.history.perform_checkin("session-open")

    assert source.count("create", EntityClass.HISTORY) == 0
    assert client.history.get_history_by_session("session-open") == []


@pytest.mark.anyio
async def test_checkin_unknown_session(client) -> None:
    with pytest.raises(SessionNotFound):
        await client.history.perform_checkin("session-missing")


@pytest.mark.anyio
async def test_checkin_requires_authenticated_actor(client, source) -> None:
    source.sign_out()

    with pytest.raises(Unauthenticated):
        await client.history.perform_checkin("session-open", member_id="profile-member")


@pytest.mark.anyio
async def test_other_history_actions_do_not_block_checkin(client) -> None:
    from rollcall.models import HistoryEntryCreate

    await client.history.create_history_entry(
        HistoryEntryCreate(session_id="session-open", member_id="profile-member", action="bonus", score=25)
    )

    entry = await client.history.perform_checkin("session-open", member_id="profile-member")

    history = client.history.get_history_by_session("session-open")
    assert [item.id for item in history][0] == entry.id
    assert client.history.get_user_session_score("session-open", "profile-member") == 125
