from __future__ import annotations

import threading
from typing import List

import pytest

import rollcall.client
from rollcall.client import RollcallClient, build_client
from rollcall.config import Settings
from rollcall.db.session import CacheDatabase


def _url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'rollcall-cache.db'}"


async def _warm(client: RollcallClient) -> None:
    await client.profiles.fetch_my_profile()
    await client.profiles.fetch_profile("profile-member")
    await client.groups.fetch_user_groups()
    await client.organizations.fetch_organization("org-1")
    await client.sessions.fetch_sessions_by_group("group-1")


@pytest.mark.anyio
async def test_durable_stores_survive_restart(tmp_path, source, clock) -> None:
    settings = Settings(ROLLCALL_EXECUTION_CONTEXT="server")
    first = RollcallClient(settings, source, database=CacheDatabase(_url(tmp_path)), clock=clock)
    await _warm(first)

    assert first.persist() == 4

    second = RollcallClient(settings, source, database=CacheDatabase(_url(tmp_path)), clock=clock)
    assert second.restore() == 4
    calls_before = len(source.calls)

    assert second.profiles.my_profile.id == "profile-owner"
    assert (await second.groups.fetch_group("group-1")).name == "Morning Runners"
    assert (await second.organizations.fetch_organization("org-1")).name == "Riverside Club"
    assert (await second.profiles.fetch_profile("profile-member")).username == "mia"
    assert len(source.calls) == calls_before

    # Sessions are not persisted and restored partitions start stale.
    assert second.sessions.get_sessions_by_group("group-1") == []
    assert not second.cache.profiles.is_valid("org-1")


@pytest.mark.anyio
async def test_persist_replaces_previous_snapshot(tmp_path, source, clock) -> None:
    database = CacheDatabase(_url(tmp_path))
    client = RollcallClient(Settings(), source, database=database, clock=clock)
    await _warm(client)
    client.persist()

    client.identity.on_logout()
    assert client.persist() == 1

    fresh = RollcallClient(Settings(), source, database=CacheDatabase(_url(tmp_path)), clock=clock)
    assert fresh.restore() == 1
    assert fresh.organizations.get_organization("org-1") is not None
    assert fresh.profiles.my_profile is None


@pytest.mark.anyio
async def test_client_context_manager_restores_and_persists(tmp_path, source) -> None:
    settings = Settings(ROLLCALL_CACHE_DATABASE_URL=_url(tmp_path))

    async with build_client(settings, source) as client:
        await client.groups.fetch_group("group-1")

    async with build_client(settings, source) as reopened:
        assert reopened.groups.get_group("group-1") is not None


def test_persistence_is_disabled_without_database(source) -> None:
    client = RollcallClient(Settings(), source)

    assert client.restore() == 0
    assert client.persist() == 0


class _ThreadRecordingClient(RollcallClient):
    def __init__(self, *args: object, **kwargs: object) -> None:
        super().__init__(*args, **kwargs)  # type: ignore[arg-type]
        self.threads: List[int] = []

    def restore(self) -> int:
        self.threads.append(threading.get_ident())
        return super().restore()

    def persist(self) -> int:
        self.threads.append(threading.get_ident())
        return super().persist()


@pytest.mark.anyio
async def test_context_manager_runs_database_work_off_the_event_loop(tmp_path, source, clock) -> None:
    client = _ThreadRecordingClient(Settings(), source, database=CacheDatabase(_url(tmp_path)), clock=clock)
    loop_thread = threading.get_ident()

    async with client:
        await client.groups.fetch_group("group-1")

    assert len(client.threads) == 2
    assert loop_thread not in client.threads


def test_build_client_configures_logging(monkeypatch, source) -> None:
    calls: List[bool] = []
    monkeypatch.setattr(rollcall.client, "configure_logging", lambda: calls.append(True))

    build_client(Settings(), source)

    assert calls == [True]
