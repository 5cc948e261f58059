"""Participant Manager boundary models: workflow inputs and outputs.

The two "get scheduled activities" workflows are distinct query modes:

  - GetScheduledActivitiesRequest (days ahead + minimum per schedule): the
    current view. Finished activities are dropped; recurring schedules are
    topped up past the window until the minimum count is met.
  - GetScheduledActivitiesByDateRangeRequest (explicit start/end): every
    activity in the window, finished ones included. No minimum count.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from bridge_shared.auth_models import AuthUser
from bridge_shared.models import PlatformResult
from bridge_shared.schedule_models import SchedulePlan, ScheduledActivity


class GetScheduledActivitiesRequest(BaseModel):
    """Input for ScheduledActivitiesWorkflow."""

    caller: AuthUser
    time_zone: str = "+00:00"
    days_ahead: int = 4
    minimum_per_schedule: int | None = None


class GetScheduledActivitiesByDateRangeRequest(BaseModel):
    """Input for ScheduledActivitiesByDateRangeWorkflow."""

    caller: AuthUser
    starts_on: datetime
    ends_on: datetime


class ScheduledActivityListResult(PlatformResult):
    """Result of both scheduled-activity workflows."""

    items: list[ScheduledActivity] = []
    time_zone: str = "+00:00"
    starts_on: datetime | None = None
    ends_on: datetime | None = None


class PublishSchedulePlanRequest(BaseModel):
    """Input for PublishSchedulePlanWorkflow: validate then store a plan."""

    caller: AuthUser
    plan: SchedulePlan


class PublishSchedulePlanResult(PlatformResult):
    """Result of PublishSchedulePlanWorkflow."""

    plan: SchedulePlan | None = None
    errors: list[str] = []
