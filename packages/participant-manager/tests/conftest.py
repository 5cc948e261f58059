"""Test fixtures for Participant Manager workflows.

Workflows are driven without a Temporal server: workflow.execute_activity is
replaced by a dispatcher that calls the activity function in-process, and
workflow.now by a controllable clock. Activities run for real against one
fakeredis-backed adapter, so these tests exercise the whole pipeline.
"""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Any
from unittest.mock import MagicMock, patch

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
from fakeredis.aioredis import FakeRedis

ENROLLED_AT = datetime(2026, 3, 2, 8, 30, tzinfo=UTC)  # a Monday


class Clock:
    """Stands in for workflow.now()."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


async def _execute_activity(activity_fn: Any, arg: Any, **kwargs: Any) -> Any:
    return await activity_fn(arg)


@pytest.fixture
def clock() -> Clock:
    return Clock(ENROLLED_AT)


@pytest.fixture
def platform(clock) -> Iterator[RedisAdapter]:
    """Patch Temporal and Redis so workflows run in-process. Yields the shared Redis."""
    redis = RedisAdapter(FakeRedis(server=fakeredis.FakeServer(), decode_responses=True))
    with (
        patch("temporalio.workflow.execute_activity", new=_execute_activity),
        patch("temporalio.workflow.now", new=clock),
        patch("temporalio.workflow.logger", new=MagicMock()),
        patch("bridge_study_access.activities.get_client", return_value=redis),
        patch("bridge_activity_access.activities.get_client", return_value=redis),
    ):
        yield redis


@pytest.fixture
def developer() -> AuthUser:
    return AuthUser(user_id="dev-1", roles=["developer"])


@pytest.fixture
def participant() -> AuthUser:
    return AuthUser(user_id="user-1", roles=[])


def _task(identifier: str, label: str) -> Activity:
    return Activity(label=label, task=TaskReference(identifier=identifier))


@pytest.fixture
def one_time_plan() -> SchedulePlan:
    """Task AAA once, three days after enrollment at 10:00."""
    return SchedulePlan(
        label="Schedule plan 1",
        strategy=SimpleScheduleStrategy(
            schedule=Schedule(
                label="Schedule 1",
                delay="P3D",
                times=["10:00"],
                activities=[_task("task:AAA", "Activity 1")],
            )
        ),
    )


@pytest.fixture
def monthly_plan() -> SchedulePlan:
    """Task BBB monthly from one month after enrollment, open for three weeks."""
    return SchedulePlan(
        label="Schedule plan 2",
        strategy=SimpleScheduleStrategy(
            schedule=Schedule(
                label="Schedule 2",
                schedule_type="recurring",
                delay="P1M",
                interval="P1M",
                expires="P3W",
                times=["10:00"],
                activities=[_task("task:BBB", "Activity 2")],
            )
        ),
    )


@pytest.fixture
def daily_plan() -> SchedulePlan:
    """Task CCC every day at 06:00 and 18:00, open for a day."""
    return SchedulePlan(
        label="Daily plan",
        strategy=SimpleScheduleStrategy(
            schedule=Schedule(
                label="Twice daily",
                schedule_type="recurring",
                interval="P1D",
                expires="P1D",
                times=["06:00", "18:00"],
                activities=[_task("task:CCC", "Activity 3")],
            )
        ),
    )
