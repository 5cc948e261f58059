"""Activity generator: expands schedule plans into scheduled activities.

Pure computation: no I/O, no clock. The caller supplies the enrollment anchor
and the query window, so the same inputs always produce the same activities
with the same GUIDs. That determinism is what lets Activity Access
deduplicate instances across repeated and overlapping queries.

Occurrence rules:
  - Occurrences are computed in the time zone of the window start.
  - anchor = enrolled_on + delay.
  - once:      the anchor date at each time of day (the anchor itself if
               no times are set).
  - recurring: anchor + k * interval for k = 0, 1, ... at each time of day,
               or successive cron fire times after the anchor.
  - A/B tests: the participant lands in exactly one group, chosen by hashing
               (plan guid, user id) into [0, 100).

Window rules:
  - An occurrence is in the window when scheduled_on <= ends_on and it is
    still actionable at starts_on: expires_on is after starts_on, or (without
    expiration) it is a one-time occurrence or scheduled_on >= starts_on.
  - minimum_per_schedule > 0 keeps a recurring schedule generating past
    ends_on until that many occurrences have been produced.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterator
from datetime import datetime, timedelta, tzinfo

from bridge_shared.schedule_models import (
    ABTestScheduleStrategy,
    Activity,
    Schedule,
    ScheduledActivity,
    SchedulePlan,
    SimpleScheduleStrategy,
)
from croniter import croniter
from dateutil.relativedelta import relativedelta

from bridge_schedule_engine.periods import is_zero, parse_period, parse_time_of_day

logger = logging.getLogger(__name__)

# Hard stop for runaway schedules (e.g. PT1M intervals over a wide window).
MAX_OCCURRENCES_PER_SCHEDULE = 10_000


def expand_schedules(
    plans: list[SchedulePlan],
    *,
    user_id: str,
    enrolled_on: datetime,
    starts_on: datetime,
    ends_on: datetime,
    minimum_per_schedule: int = 0,
) -> list[ScheduledActivity]:
    """Generate every activity the plans produce for a participant in a window.

    Returns activities ordered by (scheduled_on, guid), without duplicates.
    """
    zone = starts_on.tzinfo
    if zone is None:
        raise ValueError("starts_on must be timezone-aware")

    by_guid: dict[str, ScheduledActivity] = {}
    for plan in plans:
        schedule = select_schedule(plan, user_id)
        if schedule is None:
            continue
        try:
            generated = list(
                expand_schedule(
                    plan.guid,
                    schedule,
                    zone=zone,
                    enrolled_on=enrolled_on,
                    starts_on=starts_on,
                    ends_on=ends_on,
                    minimum=minimum_per_schedule,
                )
            )
        except ValueError as e:
            # Only the malformed plan is dropped; the rest of the study still expands.
            logger.error(f"Skipping schedule plan {plan.guid}: {e}")
            continue
        for scheduled in generated:
            by_guid.setdefault(scheduled.guid, scheduled)

    activities = sorted(by_guid.values(), key=lambda a: (a.scheduled_on, a.guid))
    logger.debug(
        f"Expanded {len(plans)} plan(s) into {len(activities)} activities for {user_id}"
    )
    return activities


def select_schedule(plan: SchedulePlan, user_id: str) -> Schedule | None:
    """Pick the schedule a participant follows under the plan's strategy."""
    strategy = plan.strategy
    if isinstance(strategy, SimpleScheduleStrategy):
        return strategy.schedule
    if isinstance(strategy, ABTestScheduleStrategy):
        if not strategy.groups:
            return None
        bucket = assignment_bucket(plan.guid, user_id)
        cumulative = 0
        for group in strategy.groups:
            cumulative += group.percentage
            if bucket < cumulative:
                return group.schedule
        return strategy.groups[-1].schedule
    return None


def assignment_bucket(plan_guid: str, user_id: str) -> int:
    """Stable bucket in [0, 100) for a participant within a plan."""
    digest = hashlib.sha256(f"{plan_guid}:{user_id}".encode()).hexdigest()
    return int(digest[:8], 16) % 100


def expand_schedule(
    plan_guid: str,
    schedule: Schedule,
    *,
    zone: tzinfo,
    enrolled_on: datetime,
    starts_on: datetime,
    ends_on: datetime,
    minimum: int = 0,
) -> Iterator[ScheduledActivity]:
    """Yield the activities of one schedule that fall in the window."""
    anchor = enrolled_on.astimezone(zone)
    if schedule.delay:
        anchor = anchor + parse_period(schedule.delay)
    expires = parse_period(schedule.expires) if schedule.expires else None
    recurring = schedule.schedule_type == "recurring" or schedule.cron_trigger is not None

    # Occurrences at or before `lower` have expired (or passed) by starts_on.
    lower = (starts_on - expires if expires is not None else starts_on).astimezone(zone)

    if schedule.cron_trigger:
        occurrences = _cron_times(schedule.cron_trigger, max(anchor, lower))
    elif recurring:
        interval = parse_period(schedule.interval or "")
        occurrences = _recurring_times(anchor, interval, schedule.times, after=lower)
    else:
        occurrences = _once_times(anchor, schedule.times)

    produced = 0
    for scheduled_on in occurrences:
        if produced >= MAX_OCCURRENCES_PER_SCHEDULE:
            logger.warning(f"Schedule '{schedule.label}' of plan {plan_guid} hit the occurrence cap")
            break
        expires_on = scheduled_on + expires if expires is not None else None
        if scheduled_on > ends_on:
            if not recurring or produced >= minimum:
                break
        elif not _actionable(scheduled_on, expires_on, starts_on, recurring):
            continue
        produced += 1
        for index, activity in enumerate(schedule.activities):
            yield _instantiate(plan_guid, index, activity, scheduled_on, expires_on)


def instance_guid(activity_guid: str, scheduled_on: datetime) -> str:
    """Deterministic instance GUID: activity GUID plus local wall-clock time."""
    return f"{activity_guid}:{scheduled_on.replace(tzinfo=None).isoformat()}"


def _instantiate(
    plan_guid: str,
    index: int,
    activity: Activity,
    scheduled_on: datetime,
    expires_on: datetime | None,
) -> ScheduledActivity:
    activity_guid = activity.guid or f"{plan_guid}-{index}"
    return ScheduledActivity(
        guid=instance_guid(activity_guid, scheduled_on),
        schedule_plan_guid=plan_guid,
        activity=activity.model_copy(update={"guid": activity_guid}),
        scheduled_on=scheduled_on,
        expires_on=expires_on,
    )


def _actionable(
    scheduled_on: datetime,
    expires_on: datetime | None,
    starts_on: datetime,
    recurring: bool,
) -> bool:
    if expires_on is not None:
        return expires_on > starts_on
    if not recurring:
        return True
    return scheduled_on >= starts_on


def _at_times(day: datetime, times: list[str]) -> list[datetime]:
    if not times:
        return [day]
    return sorted(
        datetime.combine(day.date(), parse_time_of_day(t), tzinfo=day.tzinfo) for t in times
    )


def _once_times(anchor: datetime, times: list[str]) -> Iterator[datetime]:
    yield from _at_times(anchor, times)


def _recurring_times(
    anchor: datetime, interval: relativedelta, times: list[str], after: datetime
) -> Iterator[datetime]:
    """anchor + k * interval at each time of day, skipping whole steps before `after`."""
    if is_zero(interval):
        raise ValueError("Recurring interval must be longer than zero")
    # No step is longer than _longest_step, so step k starts no later than
    # anchor + k * _longest_step. The extra day covers times of day past the anchor.
    k = max(0, (after - anchor - timedelta(days=1)) // _longest_step(interval))
    last: datetime | None = None
    while True:
        for scheduled_on in _at_times(anchor + interval * k, times):
            # Sub-day intervals land on the same wall-clock times again.
            if last is None or scheduled_on > last:
                last = scheduled_on
                yield scheduled_on
        k += 1


def _longest_step(interval: relativedelta) -> timedelta:
    return timedelta(
        days=interval.years * 366 + interval.months * 31 + interval.days,
        hours=interval.hours,
        minutes=interval.minutes,
        seconds=interval.seconds,
    )


def _cron_times(expression: str, after: datetime) -> Iterator[datetime]:
    # croniter.get_next is strictly after its base, so step back to include `after`.
    cron = croniter(expression, after - timedelta(seconds=1))
    while True:
        yield cron.get_next(datetime)
