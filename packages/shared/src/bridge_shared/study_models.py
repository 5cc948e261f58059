"""Study Access boundary models: schedule plans and upload schemas.

These types cross the Temporal activity boundary. Manager workflows and API
callers create the requests; activities in Study Access receive them and return
the results.

Design choices:
  - Every request that mutates or reads study configuration carries the caller
    (AuthUser). Study Access checks the developer role itself so no path can
    skip authorization.
  - UploadSchema.revision is the revision the submission is based on;
    UploadSchema.version is an opaque optimistic-concurrency token. Both are
    optional: a submission without them appends a new revision.
  - All Results extend PlatformResult for consistent success/failure handling.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from bridge_shared.auth_models import AuthUser
from bridge_shared.models import PlatformResult
from bridge_shared.schedule_models import SchedulePlan

# ============================================================================
# Domain objects: stored as JSON in Redis
# ============================================================================

UploadFieldType = Literal[
    "attachment_blob",
    "attachment_json_blob",
    "attachment_json_table",
    "boolean",
    "calendar_date",
    "float",
    "inline_json_blob",
    "int",
    "string",
    "timestamp",
]


class UploadFieldDefinition(BaseModel):
    """One field of an uploaded record."""

    name: str
    type: UploadFieldType
    required: bool = True
    file_extension: str | None = None
    mime_type: str | None = None
    min_app_version: int | None = None
    max_app_version: int | None = None
    max_length: int | None = None


class UploadSchema(BaseModel):
    """One revision of the schema of uploaded data."""

    study_id: str = "api"
    schema_id: str
    revision: int | None = None
    version: int | None = None
    name: str
    schema_type: Literal["ios_data", "ios_survey"]
    field_definitions: list[UploadFieldDefinition] = []
    survey_guid: str | None = None
    survey_created_on: datetime | None = None


# ============================================================================
# Schedule plan Request/Result Pairs (4)
# ============================================================================


class CreateSchedulePlanRequest(BaseModel):
    """Input for create_schedule_plan: store a validated plan."""

    caller: AuthUser
    plan: SchedulePlan


class CreateSchedulePlanResult(PlatformResult):
    """Result of create_schedule_plan."""

    plan: SchedulePlan | None = None


class GetSchedulePlanRequest(BaseModel):
    """Input for get_schedule_plan."""

    caller: AuthUser
    guid: str


class GetSchedulePlanResult(PlatformResult):
    """Result of get_schedule_plan."""

    plan: SchedulePlan | None = None


class ListSchedulePlansRequest(BaseModel):
    """Input for list_schedule_plans: all plans of one study."""

    study_id: str


class ListSchedulePlansResult(PlatformResult):
    """Result of list_schedule_plans, in creation order."""

    plans: list[SchedulePlan] = []


class DeleteSchedulePlanRequest(BaseModel):
    """Input for delete_schedule_plan."""

    caller: AuthUser
    guid: str


class DeleteSchedulePlanResult(PlatformResult):
    """Result of delete_schedule_plan."""

    guid: str = ""


# ============================================================================
# Upload schema Request/Result Pairs (7)
# ============================================================================


class CreateOrUpdateUploadSchemaRequest(BaseModel):
    """Input for create_or_update_upload_schema."""

    caller: AuthUser
    schema_def: UploadSchema


class UploadSchemaResult(PlatformResult):
    """Result carrying one schema revision."""

    schema_def: UploadSchema | None = None


class GetUploadSchemaRequest(BaseModel):
    """Input for get_upload_schema and get_most_recent_upload_schema."""

    caller: AuthUser
    schema_id: str


class GetUploadSchemaRevisionRequest(BaseModel):
    """Input for get_upload_schema_revision."""

    caller: AuthUser
    schema_id: str
    revision: int


class UploadSchemaListResult(PlatformResult):
    """Result carrying several schema revisions."""

    items: list[UploadSchema] = []


class ListUploadSchemasRequest(BaseModel):
    """Input for list_upload_schemas: most recent revision of every schema."""

    caller: AuthUser


class DeleteUploadSchemaRevisionRequest(BaseModel):
    """Input for delete_upload_schema_revision."""

    caller: AuthUser
    schema_id: str
    revision: int


class DeleteUploadSchemaRequest(BaseModel):
    """Input for delete_upload_schema_all_revisions."""

    caller: AuthUser
    schema_id: str


class DeleteUploadSchemaResult(PlatformResult):
    """Result of the two delete verbs."""

    deleted_count: int = 0
