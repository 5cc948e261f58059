"""Task queue name constants for each component.

Every component runs on its own Temporal worker with a dedicated task queue.
This gives us independent scaling, isolation, and deployment: critical because
Python's GIL means a single worker process running all activities becomes a
bottleneck under load.

These constants are the single source of truth for queue names. Both the worker
runner (which starts workers listening on the right queue) and the workflow
definitions (which dispatch activities to the right queue) reference these.
"""

# Manager: runs workflows that orchestrate activities across other queues
PARTICIPANT_MANAGER_QUEUE = "participant-manager-queue"

# Engines: business logic activities
SCHEDULE_ENGINE_QUEUE = "schedule-engine-queue"

# Resource Access: storage abstraction activities
STUDY_ACCESS_QUEUE = "study-access-queue"
ACTIVITY_ACCESS_QUEUE = "activity-access-queue"
