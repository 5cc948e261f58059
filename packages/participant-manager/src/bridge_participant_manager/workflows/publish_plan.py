"""PublishSchedulePlanWorkflow: Schedule Engine → Study Access.

A plan is validated by the engine before Study Access stores it. Access
components never call engine activities, so the manager sequences the two
(create_schedule_plan re-checks with the same validation library):

1. Schedule Engine (schedule-engine-queue): validate the plan's schedules
2. Study Access (study-access-queue): assign identity and store the plan
"""

from datetime import timedelta

from temporalio import workflow

with workflow.unsafe.imports_passed_through():
    from bridge_schedule_engine.activities import validate_schedule_plan
    from bridge_shared.participant_models import (
        PublishSchedulePlanRequest,
        PublishSchedulePlanResult,
    )
    from bridge_shared.schedule_models import (
        ValidateSchedulePlanRequest,
        ValidateSchedulePlanResult,
    )
    from bridge_shared.study_models import (
        CreateSchedulePlanRequest,
        CreateSchedulePlanResult,
    )
    from bridge_shared.task_queues import SCHEDULE_ENGINE_QUEUE, STUDY_ACCESS_QUEUE
    from bridge_study_access.activities import create_schedule_plan


@workflow.defn
class PublishSchedulePlanWorkflow:
    """Validates and stores a schedule plan."""

    @workflow.run
    async def run(self, request: PublishSchedulePlanRequest) -> PublishSchedulePlanResult:
        validation: ValidateSchedulePlanResult = await workflow.execute_activity(
            validate_schedule_plan,
            ValidateSchedulePlanRequest(plan=request.plan),
            task_queue=SCHEDULE_ENGINE_QUEUE,
            start_to_close_timeout=timedelta(seconds=30),
        )
        if not validation.success:
            workflow.logger.info(f"Rejected schedule plan '{request.plan.label}': {validation.message}")
            return PublishSchedulePlanResult(
                success=False,
                message=validation.message,
                error_code=validation.error_code,
                errors=validation.errors,
            )

        created: CreateSchedulePlanResult = await workflow.execute_activity(
            create_schedule_plan,
            CreateSchedulePlanRequest(caller=request.caller, plan=request.plan),
            task_queue=STUDY_ACCESS_QUEUE,
            start_to_close_timeout=timedelta(seconds=30),
        )
        return PublishSchedulePlanResult(
            success=created.success,
            message=created.message,
            error_code=created.error_code,
            plan=created.plan,
        )
