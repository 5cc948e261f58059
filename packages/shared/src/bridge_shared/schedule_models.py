"""Schedule domain models and the Schedule Engine boundary contract.

Domain objects (SchedulePlan, Schedule, Activity, ScheduledActivity) are stored
as JSON in Redis by the access components and flow through the Schedule Engine
when plans are expanded into concrete activities.

Design choices:
  - The plan strategy is a tagged union with an explicit `type` discriminant.
    SimpleScheduleStrategy carries one schedule; ABTestScheduleStrategy carries
    weighted groups. Pydantic picks the variant from `type` on load.
  - Periods (delay, interval, expires) stay ISO-8601 strings ("P3D", "P1M",
    "PT1H") on the wire; the engine parses them. Calendar periods like "P1M"
    cannot be represented as a timedelta.
  - ScheduledActivity.status is never stored. It is projected from the
    timestamps at read time by with_status().
  - client_data is an opaque JSON value owned by the client app.
"""

from __future__ import annotations

from datetime import datetime, timedelta, tzinfo
from typing import Annotated, Literal

from pydantic import BaseModel, Field, JsonValue, model_validator

from bridge_shared.models import PlatformResult

ScheduleStatus = Literal["scheduled", "started", "finished", "expired"]


def parse_time_zone_offset(offset: str) -> tzinfo:
    """Turn a "+04:00" / "-07:00" offset string into a fixed-offset tzinfo."""
    try:
        parsed = datetime.strptime(offset, "%z").tzinfo
    except ValueError:
        parsed = None
    if parsed is None:
        raise ValueError(f"Invalid time zone offset: {offset!r}")
    return parsed


def format_time_zone_offset(zone: tzinfo) -> str:
    """Inverse of parse_time_zone_offset for fixed-offset zones."""
    delta = zone.utcoffset(None) or timedelta(0)
    sign = "-" if delta < timedelta(0) else "+"
    minutes = abs(int(delta.total_seconds())) // 60
    return f"{sign}{minutes // 60:02d}:{minutes % 60:02d}"


# ============================================================================
# Domain objects
# ============================================================================


class TaskReference(BaseModel):
    """Points at a task the client app knows how to run."""

    identifier: str


class SurveyReference(BaseModel):
    """Points at a published survey."""

    identifier: str
    guid: str | None = None


class Activity(BaseModel):
    """Template for something a participant is asked to do."""

    guid: str | None = None
    label: str
    activity_type: Literal["task", "survey"] | None = None
    task: TaskReference | None = None
    survey: SurveyReference | None = None

    @model_validator(mode="after")
    def _derive_activity_type(self) -> Activity:
        if self.activity_type is None:
            if self.task is not None:
                self.activity_type = "task"
            elif self.survey is not None:
                self.activity_type = "survey"
        return self

    @property
    def task_identifier(self) -> str | None:
        return self.task.identifier if self.task else None


class Schedule(BaseModel):
    """When a set of activities should be done."""

    label: str = ""
    schedule_type: Literal["once", "recurring"] = "once"
    delay: str | None = None  # ISO-8601 period after enrollment
    interval: str | None = None  # ISO-8601 period between occurrences
    expires: str | None = None  # ISO-8601 validity window after scheduled_on
    times: list[str] = []  # local times of day, "HH:MM"
    cron_trigger: str | None = None  # alternative to interval + times
    activities: list[Activity] = []


class SimpleScheduleStrategy(BaseModel):
    """Every participant gets the same schedule."""

    type: Literal["SimpleScheduleStrategy"] = "SimpleScheduleStrategy"
    schedule: Schedule


class ScheduleGroup(BaseModel):
    """One arm of an A/B test."""

    percentage: int
    schedule: Schedule


class ABTestScheduleStrategy(BaseModel):
    """Participants are split across weighted schedules (percentages sum to 100)."""

    type: Literal["ABTestScheduleStrategy"] = "ABTestScheduleStrategy"
    groups: list[ScheduleGroup] = []


ScheduleStrategy = Annotated[
    SimpleScheduleStrategy | ABTestScheduleStrategy, Field(discriminator="type")
]


class SchedulePlan(BaseModel):
    """A stored definition that produces activities for the participants of a study."""

    guid: str = ""
    study_id: str = "api"
    label: str
    version: int = 0
    created_on: datetime | None = None
    modified_on: datetime | None = None
    strategy: ScheduleStrategy

    def all_schedules(self) -> list[Schedule]:
        if isinstance(self.strategy, SimpleScheduleStrategy):
            return [self.strategy.schedule]
        return [group.schedule for group in self.strategy.groups]


class ScheduledActivity(BaseModel):
    """One materialized, stateful instance of an activity at a specific time."""

    guid: str
    schedule_plan_guid: str
    activity: Activity
    scheduled_on: datetime
    expires_on: datetime | None = None
    started_on: datetime | None = None
    finished_on: datetime | None = None
    client_data: JsonValue = None
    status: ScheduleStatus | None = None  # derived on read, never persisted

    def status_at(self, now: datetime) -> ScheduleStatus:
        if self.finished_on is not None:
            return "finished"
        if self.started_on is not None:
            return "started"
        if self.expires_on is not None and now > self.expires_on:
            return "expired"
        return "scheduled"

    def with_status(self, now: datetime, zone: tzinfo | None = None) -> ScheduledActivity:
        """Copy with status projected at `now`, timestamps shown in `zone`."""
        update: dict[str, object] = {"status": self.status_at(now)}
        if zone is not None:
            for name in ("scheduled_on", "expires_on", "started_on", "finished_on"):
                value = getattr(self, name)
                if value is not None:
                    update[name] = value.astimezone(zone)
        return self.model_copy(update=update)

    def storage_json(self) -> str:
        return self.model_dump_json(exclude={"status"})


# ============================================================================
# Schedule Engine Request/Result Pairs (2)
# ============================================================================


class ValidateSchedulePlanRequest(BaseModel):
    """Input for validate_schedule_plan: check a plan before it is stored."""

    plan: SchedulePlan


class ValidateSchedulePlanResult(PlatformResult):
    """Result of validate_schedule_plan."""

    errors: list[str] = []


class ExpandSchedulesRequest(BaseModel):
    """Input for expand_schedules: materialize plans over a query window."""

    user_id: str
    plans: list[SchedulePlan]
    enrolled_on: datetime
    starts_on: datetime
    ends_on: datetime
    minimum_per_schedule: int = 0


class ExpandSchedulesResult(PlatformResult):
    """Result of expand_schedules: generated (not yet persisted) activities."""

    activities: list[ScheduledActivity] = []

