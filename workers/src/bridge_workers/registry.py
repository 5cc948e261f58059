"""Component registry: maps component names to their workflows and activities.

The runner looks up its component here. Each entry specifies:

- task_queue: Which Temporal task queue this worker polls
- workflows: Workflow classes to register (only the Participant Manager has these)
- activities: Activity functions to register
"""

from dataclasses import dataclass, field
from typing import Any

from bridge_activity_access.activities import (
    get_activity_history,
    get_participant_activity_history,
    get_task_history,
    materialize_activities,
    record_enrollment,
    update_scheduled_activities,
)
from bridge_participant_manager.workflows.publish_plan import PublishSchedulePlanWorkflow
from bridge_participant_manager.workflows.scheduled_activities import (
    ScheduledActivitiesByDateRangeWorkflow,
    ScheduledActivitiesWorkflow,
)
from bridge_schedule_engine.activities import expand_schedules, validate_schedule_plan
from bridge_shared.task_queues import (
    ACTIVITY_ACCESS_QUEUE,
    PARTICIPANT_MANAGER_QUEUE,
    SCHEDULE_ENGINE_QUEUE,
    STUDY_ACCESS_QUEUE,
)
from bridge_study_access.activities import (
    create_or_update_upload_schema,
    create_schedule_plan,
    delete_schedule_plan,
    delete_upload_schema_all_revisions,
    delete_upload_schema_revision,
    get_most_recent_upload_schema,
    get_schedule_plan,
    get_upload_schema,
    get_upload_schema_revision,
    list_schedule_plans,
    list_upload_schemas,
)


@dataclass
class ComponentConfig:
    """Configuration for a single component's worker."""

    task_queue: str
    workflows: list[Any] = field(default_factory=list)
    activities: list[Any] = field(default_factory=list)


COMPONENTS: dict[str, ComponentConfig] = {
    "participant-manager": ComponentConfig(
        task_queue=PARTICIPANT_MANAGER_QUEUE,
        workflows=[
            PublishSchedulePlanWorkflow,
            ScheduledActivitiesWorkflow,
            ScheduledActivitiesByDateRangeWorkflow,
        ],
    ),
    "schedule-engine": ComponentConfig(
        task_queue=SCHEDULE_ENGINE_QUEUE,
        activities=[validate_schedule_plan, expand_schedules],
    ),
    "study-access": ComponentConfig(
        task_queue=STUDY_ACCESS_QUEUE,
        activities=[
            create_schedule_plan,
            get_schedule_plan,
            list_schedule_plans,
            delete_schedule_plan,
            create_or_update_upload_schema,
            get_upload_schema,
            get_most_recent_upload_schema,
            get_upload_schema_revision,
            list_upload_schemas,
            delete_upload_schema_revision,
            delete_upload_schema_all_revisions,
        ],
    ),
    "activity-access": ComponentConfig(
        task_queue=ACTIVITY_ACCESS_QUEUE,
        activities=[
            record_enrollment,
            materialize_activities,
            update_scheduled_activities,
            get_activity_history,
            get_task_history,
            get_participant_activity_history,
        ],
    ),
}
