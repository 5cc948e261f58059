"""Participant Manager: Temporal Workflow definitions.

Orchestrates scheduling through three workflows:
- PublishSchedulePlanWorkflow: Schedule Engine (validate) → Study Access (store)
- ScheduledActivitiesWorkflow: Activity Access (enrollment) → Study Access (plans)
  → Schedule Engine (expand) → Activity Access (materialize), current view
- ScheduledActivitiesByDateRangeWorkflow: same pipeline over an explicit range
"""
