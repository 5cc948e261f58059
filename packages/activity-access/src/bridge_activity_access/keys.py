"""Redis key patterns for Activity Access.

All keys use the `act:` prefix and are scoped to one participant. Instances
are JSON strings; history indexes are sorted sets scored by the scheduled
time (epoch seconds), so a date window is a single score range.
"""


def enrollment_key(study_id: str, user_id: str) -> str:
    """When the participant enrolled (ISO-8601). Written once."""
    return f"act:enrollment:{study_id}:{user_id}"


def instance_key(user_id: str, guid: str) -> str:
    """One materialized scheduled activity."""
    return f"act:instance:{user_id}:{guid}"


def history_idx_activity(user_id: str, activity_guid: str) -> str:
    """Instance GUIDs of one activity template (score = scheduled_on)."""
    return f"act:idx:{user_id}:activity:{activity_guid}"


def history_idx_task(user_id: str, task_identifier: str) -> str:
    """Instance GUIDs referencing one task (score = scheduled_on)."""
    return f"act:idx:{user_id}:task:{task_identifier}"

