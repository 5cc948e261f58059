"""Activity Access boundary models: participant activity state and history.

These types cross the Temporal activity boundary between the Participant
Manager workflows (or API callers) and Activity Access.

Design choices:
  - ScheduledActivityUpdate is a partial document. The fields the caller set
    are recorded in `changed_fields` when the model is built, so the list
    survives serialization (the Temporal converter writes every field). An
    explicit `client_data=None` clears the data; an omitted field is untouched.
  - History pages are forward-only cursors. The cursor is opaque to callers;
    request_params echo what the store actually used, including defaults.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, JsonValue, model_validator

from bridge_shared.auth_models import AuthUser
from bridge_shared.models import PlatformResult
from bridge_shared.schedule_models import ScheduledActivity

MERGEABLE_FIELDS = frozenset({"started_on", "finished_on", "client_data"})


class ScheduledActivityUpdate(BaseModel):
    """Client-submitted state change for one scheduled activity."""

    guid: str
    started_on: datetime | None = None
    finished_on: datetime | None = None
    client_data: JsonValue = None
    changed_fields: list[str] = []

    @model_validator(mode="after")
    def _record_changed_fields(self) -> ScheduledActivityUpdate:
        if "changed_fields" not in self.model_fields_set:
            self.changed_fields = sorted(self.model_fields_set & MERGEABLE_FIELDS)
        unknown = set(self.changed_fields) - MERGEABLE_FIELDS
        if unknown:
            raise ValueError(f"changed_fields cannot include {sorted(unknown)}")
        return self


class HistoryRequestParams(BaseModel):
    """Effective parameters of a history query."""

    scheduled_on_start: datetime
    scheduled_on_end: datetime
    page_size: int
    offset_key: str | None = None


class ForwardCursorScheduledActivityList(BaseModel):
    """One page of activity history."""

    items: list[ScheduledActivity] = []
    next_page_offset_key: str | None = None
    has_next: bool = False
    request_params: HistoryRequestParams


# ============================================================================
# Activity Request/Result Pairs (6)
# ============================================================================


class RecordEnrollmentRequest(BaseModel):
    """Input for record_enrollment: first write wins."""

    user_id: str
    study_id: str = "api"
    enrolled_on: datetime


class RecordEnrollmentResult(PlatformResult):
    """Result of record_enrollment: the enrollment actually stored."""

    enrolled_on: datetime | None = None


class MaterializeActivitiesRequest(BaseModel):
    """Input for materialize_activities: persist generated instances."""

    user_id: str
    activities: list[ScheduledActivity]
    now: datetime
    time_zone: str = "+00:00"


class MaterializeActivitiesResult(PlatformResult):
    """Result of materialize_activities: stored instances with derived status."""

    activities: list[ScheduledActivity] = []


class UpdateScheduledActivitiesRequest(BaseModel):
    """Input for update_scheduled_activities."""

    caller: AuthUser
    updates: list[ScheduledActivityUpdate]


class UpdateScheduledActivitiesResult(PlatformResult):
    """Result of update_scheduled_activities."""

    updated_count: int = 0


class ActivityHistoryRequest(BaseModel):
    """Input for get_activity_history: the caller's own instances of one activity."""

    caller: AuthUser
    activity_guid: str
    scheduled_on_start: datetime | None = None
    scheduled_on_end: datetime | None = None
    offset_key: str | None = None
    page_size: int | None = None


class TaskHistoryRequest(BaseModel):
    """Input for get_task_history: the caller's own instances of one task."""

    caller: AuthUser
    task_identifier: str
    scheduled_on_start: datetime | None = None
    scheduled_on_end: datetime | None = None
    offset_key: str | None = None
    page_size: int | None = None


class ParticipantActivityHistoryRequest(BaseModel):
    """Input for get_participant_activity_history: a researcher's view of a participant."""

    caller: AuthUser
    user_id: str
    activity_guid: str
    scheduled_on_start: datetime | None = None
    scheduled_on_end: datetime | None = None
    offset_key: str | None = None
    page_size: int | None = None


class ActivityHistoryResult(PlatformResult):
    """Result of the three history verbs."""

    page: ForwardCursorScheduledActivityList | None = None
