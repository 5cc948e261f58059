"""Scheduled activity workflows: Activity Access → Study Access → Schedule Engine → Activity Access.

Both workflows run the same four steps and differ only in the window and the
final filter:

1. Activity Access (activity-access-queue): record enrollment (first call wins)
2. Study Access (study-access-queue): load the study's schedule plans
3. Schedule Engine (schedule-engine-queue): expand plans over the window
4. Activity Access (activity-access-queue): materialize instances, read state back

ScheduledActivitiesWorkflow is the participant's current view: the window is
now through the end of the day `days_ahead` days out, recurring schedules
are topped up to `minimum_per_schedule` occurrences, and finished or expired
activities are dropped.

ScheduledActivitiesByDateRangeWorkflow returns everything in an explicit
range, finished activities included, with no minimum count.
"""

from datetime import datetime, time, timedelta, tzinfo

from temporalio import workflow

with workflow.unsafe.imports_passed_through():
    from bridge_activity_access.activities import materialize_activities, record_enrollment
    from bridge_schedule_engine.activities import expand_schedules
    from bridge_shared.activity_models import (
        MaterializeActivitiesRequest,
        MaterializeActivitiesResult,
        RecordEnrollmentRequest,
        RecordEnrollmentResult,
    )
    from bridge_shared.auth_models import AuthUser
    from bridge_shared.models import PlatformResult
    from bridge_shared.participant_models import (
        GetScheduledActivitiesByDateRangeRequest,
        GetScheduledActivitiesRequest,
        ScheduledActivityListResult,
    )
    from bridge_shared.schedule_models import (
        ExpandSchedulesRequest,
        ExpandSchedulesResult,
        ScheduledActivity,
        format_time_zone_offset,
        parse_time_zone_offset,
    )
    from bridge_shared.study_models import ListSchedulePlansRequest, ListSchedulePlansResult
    from bridge_shared.task_queues import (
        ACTIVITY_ACCESS_QUEUE,
        SCHEDULE_ENGINE_QUEUE,
        STUDY_ACCESS_QUEUE,
    )
    from bridge_study_access.activities import list_schedule_plans

MAX_DAYS_AHEAD = 14
MAX_MINIMUM_PER_SCHEDULE = 5
MAX_DATE_RANGE = timedelta(days=15)

ACTIVITY_TIMEOUT = timedelta(seconds=30)


def current_window(now: datetime, zone: tzinfo, days_ahead: int) -> tuple[datetime, datetime]:
    """From now through the last instant of the day `days_ahead` days out, in `zone`."""
    starts_on = now.astimezone(zone)
    last_day = (starts_on + timedelta(days=days_ahead)).date()
    ends_on = datetime.combine(last_day, time.max, tzinfo=zone)
    return starts_on, ends_on


def current_view(activities: list[ScheduledActivity]) -> list[ScheduledActivity]:
    """Drop activities the participant can no longer act on."""
    return [a for a in activities if a.status in ("scheduled", "started")]


def _invalid(message: str, time_zone: str = "+00:00") -> ScheduledActivityListResult:
    return ScheduledActivityListResult(
        success=False, message=message, error_code="invalid_entity", time_zone=time_zone
    )


def _failed(step: PlatformResult, time_zone: str) -> ScheduledActivityListResult:
    return ScheduledActivityListResult(
        success=False, message=step.message, error_code=step.error_code, time_zone=time_zone
    )


async def _generate(
    caller: AuthUser,
    now: datetime,
    starts_on: datetime,
    ends_on: datetime,
    minimum_per_schedule: int,
    time_zone: str,
) -> ScheduledActivityListResult:
    """Steps 1-4, shared by both workflows. Items keep every status."""
    enrollment: RecordEnrollmentResult = await workflow.execute_activity(
        record_enrollment,
        RecordEnrollmentRequest(user_id=caller.user_id, study_id=caller.study_id, enrolled_on=now),
        task_queue=ACTIVITY_ACCESS_QUEUE,
        start_to_close_timeout=ACTIVITY_TIMEOUT,
    )
    if not enrollment.success:
        return _failed(enrollment, time_zone)

    plans: ListSchedulePlansResult = await workflow.execute_activity(
        list_schedule_plans,
        ListSchedulePlansRequest(study_id=caller.study_id),
        task_queue=STUDY_ACCESS_QUEUE,
        start_to_close_timeout=ACTIVITY_TIMEOUT,
    )
    if not plans.success:
        return _failed(plans, time_zone)

    expanded: ExpandSchedulesResult = await workflow.execute_activity(
        expand_schedules,
        ExpandSchedulesRequest(
            user_id=caller.user_id,
            plans=plans.plans,
            enrolled_on=enrollment.enrolled_on,
            starts_on=starts_on,
            ends_on=ends_on,
            minimum_per_schedule=minimum_per_schedule,
        ),
        task_queue=SCHEDULE_ENGINE_QUEUE,
        start_to_close_timeout=ACTIVITY_TIMEOUT,
    )
    if not expanded.success:
        return _failed(expanded, time_zone)

    materialized: MaterializeActivitiesResult = await workflow.execute_activity(
        materialize_activities,
        MaterializeActivitiesRequest(
            user_id=caller.user_id,
            activities=expanded.activities,
            now=now,
            time_zone=time_zone,
        ),
        task_queue=ACTIVITY_ACCESS_QUEUE,
        start_to_close_timeout=ACTIVITY_TIMEOUT,
    )
    if not materialized.success:
        return _failed(materialized, time_zone)

    return ScheduledActivityListResult(
        success=True,
        message=f"{len(materialized.activities)} scheduled activities",
        items=materialized.activities,
        time_zone=time_zone,
        starts_on=starts_on,
        ends_on=ends_on,
    )


@workflow.defn
class ScheduledActivitiesWorkflow:
    """The participant's current activities for the next few days."""

    @workflow.run
    async def run(self, request: GetScheduledActivitiesRequest) -> ScheduledActivityListResult:
        if not 0 <= request.days_ahead <= MAX_DAYS_AHEAD:
            return _invalid(f"days_ahead must be from 0 to {MAX_DAYS_AHEAD}")
        minimum = request.minimum_per_schedule or 0
        if not 0 <= minimum <= MAX_MINIMUM_PER_SCHEDULE:
            return _invalid(f"minimum_per_schedule must be from 0 to {MAX_MINIMUM_PER_SCHEDULE}")
        try:
            zone = parse_time_zone_offset(request.time_zone)
        except ValueError as e:
            return _invalid(str(e))

        time_zone = format_time_zone_offset(zone)
        now = workflow.now()
        starts_on, ends_on = current_window(now, zone, request.days_ahead)

        result = await _generate(request.caller, now, starts_on, ends_on, minimum, time_zone)
        if result.success:
            result.items = current_view(result.items)
            result.message = f"{len(result.items)} current activities"
            workflow.logger.info(
                f"{request.caller.user_id}: {len(result.items)} current activities "
                f"through {ends_on.isoformat()}"
            )
        return result


@workflow.defn
class ScheduledActivitiesByDateRangeWorkflow:
    """Every activity of the participant in an explicit date range."""

    @workflow.run
    async def run(
        self, request: GetScheduledActivitiesByDateRangeRequest
    ) -> ScheduledActivityListResult:
        starts_on, ends_on = request.starts_on, request.ends_on
        if starts_on.tzinfo is None or ends_on.tzinfo is None:
            return _invalid("starts_on and ends_on must carry a time zone offset")
        if ends_on < starts_on:
            return _invalid("ends_on must not be before starts_on")
        if ends_on - starts_on > MAX_DATE_RANGE:
            return _invalid(f"Date range cannot exceed {MAX_DATE_RANGE.days} days")

        zone = starts_on.tzinfo
        time_zone = format_time_zone_offset(zone)
        result = await _generate(request.caller, workflow.now(), starts_on, ends_on, 0, time_zone)
        if result.success:
            workflow.logger.info(
                f"{request.caller.user_id}: {len(result.items)} activities "
                f"from {starts_on.isoformat()} to {ends_on.isoformat()}"
            )
        return result
