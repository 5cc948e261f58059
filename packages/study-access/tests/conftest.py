"""Test fixtures for Study Access.

Stores run against a real RedisAdapter over an isolated fakeredis server, so
SET NX, sorted-set ordering and MULTI behave the way they do in production.
Activities call get_client(): tests patch it to return the same adapter.
"""

from __future__ import annotations

import fakeredis
import pytest
from bridge_shared.auth_models import AuthUser
from bridge_shared.redis_client import RedisAdapter
from bridge_shared.schedule_models import (
    Activity,
    Schedule,
    SchedulePlan,
    SimpleScheduleStrategy,
    TaskReference,
)
from bridge_shared.study_models import UploadFieldDefinition, UploadSchema
from fakeredis.aioredis import FakeRedis


@pytest.fixture
def redis() -> RedisAdapter:
    """A fresh, empty Redis per test."""
    server = fakeredis.FakeServer()
    return RedisAdapter(FakeRedis(server=server, decode_responses=True))


@pytest.fixture
def developer() -> AuthUser:
    return AuthUser(user_id="dev-1", email="dev@example.org", study_id="api", roles=["developer"])


@pytest.fixture
def participant() -> AuthUser:
    return AuthUser(user_id="user-1", email="user@example.org", study_id="api", roles=[])


@pytest.fixture
def daily_plan() -> SchedulePlan:
    """A plan whose activity has no GUID yet, as a developer submits it."""
    return SchedulePlan(
        label="Daily task schedule plan",
        strategy=SimpleScheduleStrategy(
            schedule=Schedule(
                label="Daily Task at 4 times",
                schedule_type="recurring",
                interval="P1D",
                expires="P1D",
                times=["06:00", "10:00", "14:00", "18:00"],
                activities=[Activity(label="Tap test", task=TaskReference(identifier="task:AAA"))],
            )
        ),
    )


@pytest.fixture
def foo_field() -> UploadFieldDefinition:
    return UploadFieldDefinition(name="foo", type="string", required=True)


@pytest.fixture
def bar_field() -> UploadFieldDefinition:
    return UploadFieldDefinition(name="bar", type="int", required=False)


@pytest.fixture
def baz_field() -> UploadFieldDefinition:
    return UploadFieldDefinition(name="baz", type="boolean", required=True)


@pytest.fixture
def simple_schema() -> UploadSchema:
    """Minimal schema with no revision and no version token."""
    return UploadSchema(
        schema_id="integration-test-schema-abcd",
        name="Schema",
        schema_type="ios_data",
        field_definitions=[UploadFieldDefinition(name="field", type="string")],
    )
