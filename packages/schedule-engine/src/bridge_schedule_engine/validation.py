"""Schedule plan validation.

Malformed schedules are rejected when a plan is published, never at
generation time: once a plan is stored, expand_schedules can assume every
period, time of day and cron expression parses.
"""

from __future__ import annotations

from bridge_shared.errors import InvalidEntityError
from bridge_shared.schedule_models import (
    ABTestScheduleStrategy,
    Schedule,
    SchedulePlan,
)
from croniter import croniter

from bridge_schedule_engine.periods import (
    is_sub_day,
    is_zero,
    parse_period,
    parse_time_of_day,
)


def validate_schedule_plan(plan: SchedulePlan) -> None:
    """Raise InvalidEntityError listing every problem found in the plan."""
    errors = schedule_plan_errors(plan)
    if errors:
        raise InvalidEntityError("; ".join(errors))


def schedule_plan_errors(plan: SchedulePlan) -> list[str]:
    errors: list[str] = []
    if not plan.label.strip():
        errors.append("label is required")

    if isinstance(plan.strategy, ABTestScheduleStrategy):
        if not plan.strategy.groups:
            errors.append("strategy.groups must not be empty")
        total = sum(group.percentage for group in plan.strategy.groups)
        if plan.strategy.groups and total != 100:
            errors.append(f"strategy.groups percentages must sum to 100, not {total}")
        for i, group in enumerate(plan.strategy.groups):
            if group.percentage < 0:
                errors.append(f"strategy.groups[{i}].percentage must not be negative")
            errors.extend(_schedule_errors(group.schedule, f"strategy.groups[{i}].schedule"))
    else:
        errors.extend(_schedule_errors(plan.strategy.schedule, "strategy.schedule"))
    return errors


def _schedule_errors(schedule: Schedule, path: str) -> list[str]:
    errors: list[str] = []

    for field in ("delay", "interval", "expires"):
        value = getattr(schedule, field)
        if value is None:
            continue
        try:
            period = parse_period(value)
        except ValueError:
            errors.append(f"{path}.{field} is not an ISO-8601 period: {value!r}")
            continue
        if field == "interval" and is_zero(period):
            errors.append(f"{path}.interval must be longer than zero")
        elif field == "interval" and schedule.times and is_sub_day(period):
            errors.append(f"{path}.interval must be at least one day when times are set")

    for t in schedule.times:
        try:
            parse_time_of_day(t)
        except ValueError:
            errors.append(f"{path}.times contains an invalid time of day: {t!r}")

    if schedule.cron_trigger is not None:
        if not croniter.is_valid(schedule.cron_trigger):
            errors.append(f"{path}.cron_trigger is not a valid cron expression")
        if schedule.interval is not None:
            errors.append(f"{path} cannot set both cron_trigger and interval")
    elif schedule.schedule_type == "recurring":
        if schedule.interval is None:
            errors.append(f"{path}.interval is required for a recurring schedule")
        if not schedule.times:
            errors.append(f"{path}.times must contain at least one time for a recurring schedule")
    elif schedule.interval is not None:
        errors.append(f"{path}.interval must not be set for a one-time schedule")

    if not schedule.activities:
        errors.append(f"{path}.activities must contain at least one activity")
    for i, activity in enumerate(schedule.activities):
        if not activity.label.strip():
            errors.append(f"{path}.activities[{i}].label is required")
        if activity.task is None and activity.survey is None:
            errors.append(f"{path}.activities[{i}] must reference a task or a survey")
        if activity.task is not None and activity.survey is not None:
            errors.append(f"{path}.activities[{i}] cannot reference both a task and a survey")
    return errors
