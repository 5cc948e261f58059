"""Test fixtures for the Schedule Engine.

Plans mirror the ones a study developer sets up in practice: a one-time task
three days after enrollment, a monthly task starting a month in, a task four
times a day, a cron-driven task, and a three-arm A/B test.
"""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from bridge_shared.schedule_models import (
    ABTestScheduleStrategy,
    Activity,
    Schedule,
    ScheduleGroup,
    SchedulePlan,
    SimpleScheduleStrategy,
    TaskReference,
)

ENROLLED_ON = datetime(2026, 3, 2, 8, 30, tzinfo=UTC)  # a Monday


def task_activity(identifier: str, label: str | None = None, guid: str | None = None) -> Activity:
    return Activity(
        guid=guid or f"guid-{identifier}",
        label=label or f"{identifier} activity",
        task=TaskReference(identifier=identifier),
    )


def simple_plan(guid: str, schedule: Schedule, label: str = "Plan") -> SchedulePlan:
    return SchedulePlan(
        guid=guid, label=label, strategy=SimpleScheduleStrategy(schedule=schedule)
    )


@pytest.fixture
def enrolled_on() -> datetime:
    return ENROLLED_ON


@pytest.fixture
def one_time_after_three_days() -> SchedulePlan:
    return simple_plan(
        "plan-once",
        Schedule(
            label="Schedule 1",
            schedule_type="once",
            delay="P3D",
            times=["10:00"],
            activities=[task_activity("task:AAA", label="Activity 1")],
        ),
        label="Schedule plan 1",
    )


@pytest.fixture
def monthly_after_one_month() -> SchedulePlan:
    return simple_plan(
        "plan-monthly",
        Schedule(
            label="Schedule 2",
            schedule_type="recurring",
            delay="P1M",
            interval="P1M",
            expires="P3W",
            times=["10:00"],
            activities=[task_activity("task:BBB", label="Activity 2")],
        ),
        label="Schedule plan 2",
    )


@pytest.fixture
def daily_at_four_times() -> SchedulePlan:
    return simple_plan(
        "plan-daily",
        Schedule(
            label="Daily Task at 4 times",
            schedule_type="recurring",
            interval="P1D",
            expires="P1D",
            times=["06:00", "10:00", "14:00", "18:00"],
            activities=[task_activity("task:AAA")],
        ),
        label="Daily task schedule plan",
    )


@pytest.fixture
def cron_plan() -> SchedulePlan:
    return simple_plan(
        "plan-cron",
        Schedule(
            label="Test label for the user",
            schedule_type="recurring",
            cron_trigger="0 11 * * MON,WED,FRI",
            expires="PT1H",
            activities=[task_activity("task:CCC")],
        ),
        label="Cron-based schedule",
    )


@pytest.fixture
def ab_test_plan() -> SchedulePlan:
    def arm(identifier: str) -> Schedule:
        return Schedule(
            label="Test label for the user",
            schedule_type="recurring",
            cron_trigger="0 11 * * MON,WED,FRI",
            expires="PT1H",
            activities=[task_activity(identifier)],
        )

    return SchedulePlan(
        guid="plan-ab",
        label="A/B Test Schedule Plan",
        strategy=ABTestScheduleStrategy(
            groups=[
                ScheduleGroup(percentage=40, schedule=arm("task:AAA")),
                ScheduleGroup(percentage=40, schedule=arm("task:BBB")),
                ScheduleGroup(percentage=20, schedule=arm("task:CCC")),
            ]
        ),
    )
