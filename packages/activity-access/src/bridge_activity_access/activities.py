"""Activity Access activities: 6 business verb operations.

Run on ACTIVITY_ACCESS_QUEUE. Each activity builds a ScheduledActivityStore over
the RedisAdapter and translates BridgeError into a failed result carrying
the error code.

Business verbs follow the Righting Software test: "If I switched from Redis
to PostgreSQL, would this operation name still make sense?"
"""

from __future__ import annotations

from datetime import UTC, datetime

from bridge_auth.jwt import RESEARCHER, require_role
from bridge_shared.activity_models import (
    ActivityHistoryRequest,
    ActivityHistoryResult,
    MaterializeActivitiesRequest,
    MaterializeActivitiesResult,
    ParticipantActivityHistoryRequest,
    RecordEnrollmentRequest,
    RecordEnrollmentResult,
    TaskHistoryRequest,
    UpdateScheduledActivitiesRequest,
    UpdateScheduledActivitiesResult,
)
from bridge_shared.errors import BridgeError
from bridge_shared.redis_client import get_client
from bridge_shared.schedule_models import parse_time_zone_offset
from temporalio import activity

from bridge_activity_access.store import ScheduledActivityStore, resolve_history_params

# ============================================================================
# record_enrollment
# ============================================================================


@activity.defn
async def record_enrollment(request: RecordEnrollmentRequest) -> RecordEnrollmentResult:
    """Anchor the participant's schedules. The first recorded time is kept."""
    try:
        enrolled_on = await ScheduledActivityStore(get_client()).record_enrollment(
            request.user_id, request.study_id, request.enrolled_on
        )
        return RecordEnrollmentResult(
            success=True,
            message=f"{request.user_id} enrolled in {request.study_id} at {enrolled_on.isoformat()}",
            enrolled_on=enrolled_on,
        )
    except Exception as e:
        return RecordEnrollmentResult(success=False, message=f"record_enrollment failed: {e}")


# ============================================================================
# materialize_activities
# ============================================================================


@activity.defn
async def materialize_activities(
    request: MaterializeActivitiesRequest,
) -> MaterializeActivitiesResult:
    """Persist generated activities and return their stored state."""
    try:
        zone = parse_time_zone_offset(request.time_zone)
        activities = await ScheduledActivityStore(get_client()).materialize(
            request.user_id, request.activities, request.now, zone
        )
        return MaterializeActivitiesResult(
            success=True,
            message=f"Materialized {len(activities)} activities for {request.user_id}",
            activities=activities,
        )
    except Exception as e:
        return MaterializeActivitiesResult(
            success=False, message=f"materialize_activities failed: {e}"
        )


# ============================================================================
# update_scheduled_activities
# ============================================================================


@activity.defn
async def update_scheduled_activities(
    request: UpdateScheduledActivitiesRequest,
) -> UpdateScheduledActivitiesResult:
    """Record start/finish times and client data on the caller's activities."""
    try:
        count = await ScheduledActivityStore(get_client()).update(
            request.caller.user_id, request.updates
        )
        return UpdateScheduledActivitiesResult(
            success=True, message=f"Updated {count} scheduled activities", updated_count=count
        )
    except BridgeError as e:
        return UpdateScheduledActivitiesResult(success=False, message=str(e), error_code=e.code)
    except Exception as e:
        return UpdateScheduledActivitiesResult(
            success=False, message=f"update_scheduled_activities failed: {e}"
        )


# ============================================================================
# get_activity_history
# ============================================================================


@activity.defn
async def get_activity_history(request: ActivityHistoryRequest) -> ActivityHistoryResult:
    """One page of the caller's instances of an activity."""
    try:
        now = datetime.now(UTC)
        params = resolve_history_params(
            scheduled_on_start=request.scheduled_on_start,
            scheduled_on_end=request.scheduled_on_end,
            page_size=request.page_size,
            offset_key=request.offset_key,
            now=now,
        )
        page = await ScheduledActivityStore(get_client()).activity_history(
            request.caller.user_id, request.activity_guid, params, now
        )
        return ActivityHistoryResult(
            success=True, message=f"Returned {len(page.items)} history item(s)", page=page
        )
    except BridgeError as e:
        return ActivityHistoryResult(success=False, message=str(e), error_code=e.code)
    except Exception as e:
        return ActivityHistoryResult(success=False, message=f"get_activity_history failed: {e}")


# ============================================================================
# get_task_history
# ============================================================================


@activity.defn
async def get_task_history(request: TaskHistoryRequest) -> ActivityHistoryResult:
    """One page of the caller's instances of a task."""
    try:
        now = datetime.now(UTC)
        params = resolve_history_params(
            scheduled_on_start=request.scheduled_on_start,
            scheduled_on_end=request.scheduled_on_end,
            page_size=request.page_size,
            offset_key=request.offset_key,
            now=now,
        )
        page = await ScheduledActivityStore(get_client()).task_history(
            request.caller.user_id, request.task_identifier, params, now
        )
        return ActivityHistoryResult(
            success=True, message=f"Returned {len(page.items)} history item(s)", page=page
        )
    except BridgeError as e:
        return ActivityHistoryResult(success=False, message=str(e), error_code=e.code)
    except Exception as e:
        return ActivityHistoryResult(success=False, message=f"get_task_history failed: {e}")


# ============================================================================
# get_participant_activity_history
# ============================================================================


@activity.defn
async def get_participant_activity_history(
    request: ParticipantActivityHistoryRequest,
) -> ActivityHistoryResult:
    """A researcher's view of another participant's instances of an activity."""
    try:
        require_role(request.caller, RESEARCHER)
        now = datetime.now(UTC)
        params = resolve_history_params(
            scheduled_on_start=request.scheduled_on_start,
            scheduled_on_end=request.scheduled_on_end,
            page_size=request.page_size,
            offset_key=request.offset_key,
            now=now,
        )
        page = await ScheduledActivityStore(get_client()).activity_history(
            request.user_id, request.activity_guid, params, now
        )
        return ActivityHistoryResult(
            success=True,
            message=f"Returned {len(page.items)} history item(s) of {request.user_id}",
            page=page,
        )
    except BridgeError as e:
        return ActivityHistoryResult(success=False, message=str(e), error_code=e.code)
    except Exception as e:
        return ActivityHistoryResult(
            success=False, message=f"get_participant_activity_history failed: {e}"
        )
