"""Schedule Engine activities: 2 business verb operations.

Run on SCHEDULE_ENGINE_QUEUE. The engine is pure business logic: it never
touches storage. Plans come in from Study Access via the workflow; generated
activities go out to Activity Access via the workflow.

Business verbs follow the Righting Software test: "If scheduling moved from
plans to an external calendar, would this operation name still make sense?"
"""

from __future__ import annotations

from bridge_shared.schedule_models import (
    ExpandSchedulesRequest,
    ExpandSchedulesResult,
    ValidateSchedulePlanRequest,
    ValidateSchedulePlanResult,
)
from temporalio import activity

from bridge_schedule_engine.generator import expand_schedules as generate
from bridge_schedule_engine.validation import schedule_plan_errors

# ============================================================================
# validate_schedule_plan
# ============================================================================


@activity.defn
async def validate_schedule_plan(
    request: ValidateSchedulePlanRequest,
) -> ValidateSchedulePlanResult:
    """Check a plan's schedules before it is stored."""
    try:
        errors = schedule_plan_errors(request.plan)
        if errors:
            return ValidateSchedulePlanResult(
                success=False,
                message=f"Schedule plan '{request.plan.label}' is invalid",
                error_code="invalid_entity",
                errors=errors,
            )
        return ValidateSchedulePlanResult(
            success=True, message=f"Schedule plan '{request.plan.label}' is valid"
        )
    except Exception as e:
        return ValidateSchedulePlanResult(
            success=False, message=f"validate_schedule_plan failed: {e}"
        )


# ============================================================================
# expand_schedules
# ============================================================================


@activity.defn
async def expand_schedules(request: ExpandSchedulesRequest) -> ExpandSchedulesResult:
    """Expand plans into concrete scheduled activities over the query window."""
    try:
        activities = generate(
            request.plans,
            user_id=request.user_id,
            enrolled_on=request.enrolled_on,
            starts_on=request.starts_on,
            ends_on=request.ends_on,
            minimum_per_schedule=request.minimum_per_schedule,
        )
        return ExpandSchedulesResult(
            success=True,
            message=f"Generated {len(activities)} activities from {len(request.plans)} plan(s)",
            activities=activities,
        )
    except Exception as e:
        return ExpandSchedulesResult(
            success=False, message=f"expand_schedules failed: {e}"
        )
