"""Infrastructure verification script.

Starts one Temporal worker per component, publishes a daily schedule plan, and
asks for a participant's scheduled activities twice. Verifies that activities
dispatch across all four queues and that repeated queries return the same
activity instances.

Without UPSTASH_REDIS_REST_URL the access components share an in-memory
fakeredis, which is enough here because every worker runs in this process.

Prerequisites:
  - Temporal dev server running: `temporal server start-dev`
    OR Temporal Cloud credentials in .env
  - Dependencies installed: `pip install -e .`

Usage:
  python scripts/verify_infra.py
"""

import asyncio
import logging
import uuid

from bridge_shared.auth_models import AuthUser
from bridge_shared.participant_models import (
    GetScheduledActivitiesRequest,
    PublishSchedulePlanRequest,
)
from bridge_shared.schedule_models import (
    Activity,
    Schedule,
    SchedulePlan,
    SimpleScheduleStrategy,
    TaskReference,
)
from bridge_shared.task_queues import PARTICIPANT_MANAGER_QUEUE
from bridge_shared.temporal_client import connect
from bridge_participant_manager.workflows.publish_plan import PublishSchedulePlanWorkflow
from bridge_participant_manager.workflows.scheduled_activities import ScheduledActivitiesWorkflow
from bridge_workers.registry import COMPONENTS
from temporalio.worker import Worker

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DAILY_PLAN = SchedulePlan(
    label="Verify infra daily plan",
    strategy=SimpleScheduleStrategy(
        schedule=Schedule(
            label="Twice daily",
            schedule_type="recurring",
            interval="P1D",
            expires="P1D",
            times=["06:00", "18:00"],
            activities=[Activity(label="Tapping", task=TaskReference(identifier="task:tap"))],
        )
    ),
)


async def main() -> None:
    """Run the full verification: start workers, execute workflows, check results."""
    client = await connect()
    logger.info("Connected to Temporal server")

    # In production these are separate services; here they run as concurrent
    # workers in one process to verify the dispatch pattern.
    workers = [
        Worker(
            client,
            task_queue=config.task_queue,
            workflows=config.workflows,
            activities=config.activities,
        )
        for config in COMPONENTS.values()
    ]
    async with workers[0], workers[1], workers[2], workers[3]:
        logger.info(f"All {len(workers)} workers started, publishing plan")

        run_id = uuid.uuid4()
        developer = AuthUser(user_id=f"verify-dev-{run_id}", roles=["developer"])
        participant = AuthUser(user_id=f"verify-user-{run_id}")

        published = await client.execute_workflow(
            PublishSchedulePlanWorkflow.run,
            PublishSchedulePlanRequest(caller=developer, plan=DAILY_PLAN),
            id=f"verify-publish-{run_id}",
            task_queue=PARTICIPANT_MANAGER_QUEUE,
        )
        assert published.success, f"Publish failed: {published.message}"
        logger.info(f"Published plan {published.plan.guid}")

        results = []
        for attempt in range(2):
            results.append(
                await client.execute_workflow(
                    ScheduledActivitiesWorkflow.run,
                    GetScheduledActivitiesRequest(caller=participant, days_ahead=2),
                    id=f"verify-scheduled-{run_id}-{attempt}",
                    task_queue=PARTICIPANT_MANAGER_QUEUE,
                )
            )

        first, second = results
        assert first.success, f"Scheduled activities failed: {first.message}"
        assert first.items, "No scheduled activities were generated"
        assert [i.guid for i in first.items] == [i.guid for i in second.items], (
            "Repeated queries returned different activity instances"
        )

        logger.info(f"VERIFICATION PASSED: {len(first.items)} activities dispatched across queues")


if __name__ == "__main__":
    asyncio.run(main())
