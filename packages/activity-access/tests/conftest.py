"""Test fixtures for Activity Access.

Stores run against a real RedisAdapter over an isolated fakeredis server.
Instances are built directly rather than through the Schedule Engine so these
tests pin down storage and paging behaviour on their own.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import fakeredis
import pytest
from bridge_shared.auth_models import AuthUser
from bridge_shared.redis_client import RedisAdapter
from bridge_shared.schedule_models import Activity, ScheduledActivity, TaskReference
from fakeredis.aioredis import FakeRedis

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)


@pytest.fixture
def redis() -> RedisAdapter:
    server = fakeredis.FakeServer()
    return RedisAdapter(FakeRedis(server=server, decode_responses=True))


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def participant() -> AuthUser:
    return AuthUser(user_id="user-1", email="user@example.org", roles=[])


@pytest.fixture
def researcher() -> AuthUser:
    return AuthUser(user_id="researcher-1", email="researcher@example.org", roles=["researcher"])


@pytest.fixture
def make_instance() -> Callable[..., ScheduledActivity]:
    """Build a scheduled activity the way the generator would."""

    def _make(
        scheduled_on: datetime,
        activity_guid: str = "act-tap",
        task_identifier: str = "task:AAA",
        expires: timedelta | None = timedelta(days=1),
    ) -> ScheduledActivity:
        activity = Activity(
            guid=activity_guid,
            label="Tap test",
            task=TaskReference(identifier=task_identifier),
        )
        return ScheduledActivity(
            guid=f"{activity_guid}:{scheduled_on.replace(tzinfo=None).isoformat()}",
            schedule_plan_guid="plan-1",
            activity=activity,
            scheduled_on=scheduled_on,
            expires_on=scheduled_on + expires if expires is not None else None,
        )

    return _make


@pytest.fixture
def twelve_instances(make_instance) -> list[ScheduledActivity]:
    """Four a day over three days, starting 2026-03-02 06:00 UTC."""
    first = datetime(2026, 3, 2, 6, 0, tzinfo=UTC)
    return [
        make_instance(first + timedelta(days=day, hours=4 * slot))
        for day in range(3)
        for slot in range(4)
    ]
