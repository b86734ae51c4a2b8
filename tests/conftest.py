from __future__ import annotations

import os
from typing import Callable, List

import pytest

os.environ.setdefault("ROLLCALL_EXECUTION_CONTEXT", "client")

from rollcall.client import RollcallClient  # noqa: E402
from rollcall.config import Settings  # noqa: E402
from rollcall.models import EntityClass  # noqa: E402
from fakes import InMemorySource  # noqa: E402
from rollcall.telemetry import TelemetryEvent, clear_listeners, register_listener  # noqa: E402

OWNER_ID = "profile-owner"
ADMIN_ID = "profile-admin"
MEMBER_ID = "profile-member"
OUTSIDER_ID = "profile-outsider"
ORG_ID = "org-1"
GROUP_ID = "group-1"
OPEN_SESSION_ID = "session-open"
CLOSED_SESSION_ID = "session-closed"


class ManualClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def seed_world(source: InMemorySource) -> None:
    """One organization, one group with an owner, an admin and a member, two sessions."""
    source.seed(EntityClass.ORGANIZATION, id=ORG_ID, name="Riverside Club", created_at="2024-01-01T09:00:00+00:00")
    for profile_id, username, full_name in (
        (OWNER_ID, "olivia", "Olivia Owner"),
        (ADMIN_ID, "adam", "Adam Admin"),
        (MEMBER_ID, "mia", "Mia Member"),
        (OUTSIDER_ID, "otto", "Otto Outsider"),
    ):
        source.seed(
            EntityClass.PROFILE,
            id=profile_id,
            username=username,
            full_name=full_name,
            organization_id=ORG_ID,
            created_at="2024-01-01T09:00:00+00:00",
        )
    source.seed(
        EntityClass.GROUP,
        id=GROUP_ID,
        name="Morning Runners",
        code="RUNNERSA",
        owner_id=OWNER_ID,
        created_at="2024-01-02T09:00:00+00:00",
    )
    for member_row_id, profile_id, role, joined_at in (
        ("member-row-owner", OWNER_ID, "owner", "2024-01-02T09:00:00+00:00"),
        ("member-row-member", MEMBER_ID, "member", "2024-01-04T09:00:00+00:00"),
        ("member-row-admin", ADMIN_ID, "admin", "2024-01-03T09:00:00+00:00"),
    ):
        source.seed(
            EntityClass.MEMBER,
            id=member_row_id,
            group_id=GROUP_ID,
            profile_id=profile_id,
            role=role,
            joined_at=joined_at,
        )
    source.seed(
        EntityClass.SESSION,
        id=CLOSED_SESSION_ID,
        name="Week 1",
        group_id=GROUP_ID,
        status="closed",
        created_at="2024-02-01T07:00:00+00:00",
    )
    source.seed(
        EntityClass.SESSION,
        id=OPEN_SESSION_ID,
        name="Week 2",
        group_id=GROUP_ID,
        status="open",
        created_at="2024-02-08T07:00:00+00:00",
    )


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def source() -> InMemorySource:
    remote = InMemorySource(actor_id=OWNER_ID)
    seed_world(remote)
    return remote


@pytest.fixture
def make_client(source: InMemorySource, clock: ManualClock) -> Callable[..., RollcallClient]:
    def _make(context: str = "client", **overrides: object) -> RollcallClient:
        settings = Settings(ROLLCALL_EXECUTION_CONTEXT=context, **overrides)  # type: ignore[arg-type]
        return RollcallClient(settings, source, clock=clock)

    return _make


@pytest.fixture
def client(make_client: Callable[..., RollcallClient]) -> RollcallClient:
    return make_client("client")


@pytest.fixture
def server_client(make_client: Callable[..., RollcallClient]) -> RollcallClient:
    return make_client("server")


@pytest.fixture
def events() -> List[TelemetryEvent]:
    captured: List[TelemetryEvent] = []
    register_listener(captured.append)
    yield captured
    clear_listeners()
