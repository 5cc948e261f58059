"""Study Access activities: 11 business verb operations.

Run on STUDY_ACCESS_QUEUE. Each activity builds a store over the RedisAdapter,
checks the caller's role, and translates BridgeError into a failed result
carrying the error code.

Business verbs follow the Righting Software test: "If I switched from Redis
to PostgreSQL, would this operation name still make sense?"
"""

from __future__ import annotations

from bridge_auth.jwt import DEVELOPER, require_role
from bridge_schedule_engine.validation import validate_schedule_plan
from bridge_shared.errors import BridgeError
from bridge_shared.redis_client import get_client
from bridge_shared.study_models import (
    CreateOrUpdateUploadSchemaRequest,
    CreateSchedulePlanRequest,
    CreateSchedulePlanResult,
    DeleteSchedulePlanRequest,
    DeleteSchedulePlanResult,
    DeleteUploadSchemaRequest,
    DeleteUploadSchemaResult,
    DeleteUploadSchemaRevisionRequest,
    GetSchedulePlanRequest,
    GetSchedulePlanResult,
    GetUploadSchemaRequest,
    GetUploadSchemaRevisionRequest,
    ListSchedulePlansRequest,
    ListSchedulePlansResult,
    ListUploadSchemasRequest,
    UploadSchemaListResult,
    UploadSchemaResult,
)
from temporalio import activity

from bridge_study_access.plans import SchedulePlanStore
from bridge_study_access.schemas import UploadSchemaStore

# ============================================================================
# create_schedule_plan
# ============================================================================


@activity.defn
async def create_schedule_plan(request: CreateSchedulePlanRequest) -> CreateSchedulePlanResult:
    """Validate and store a plan in the caller's study."""
    try:
        require_role(request.caller, DEVELOPER)
        validate_schedule_plan(request.plan)
        plan = request.plan.model_copy(update={"study_id": request.caller.study_id})
        stored = await SchedulePlanStore(get_client()).create(plan)
        return CreateSchedulePlanResult(
            success=True,
            message=f"Schedule plan '{stored.label}' created",
            plan=stored,
        )
    except BridgeError as e:
        return CreateSchedulePlanResult(success=False, message=str(e), error_code=e.code)
    except Exception as e:
        return CreateSchedulePlanResult(
            success=False, message=f"create_schedule_plan failed: {e}"
        )


# ============================================================================
# get_schedule_plan
# ============================================================================


@activity.defn
async def get_schedule_plan(request: GetSchedulePlanRequest) -> GetSchedulePlanResult:
    try:
        require_role(request.caller, DEVELOPER)
        plan = await SchedulePlanStore(get_client()).get(request.guid, request.caller.study_id)
        return GetSchedulePlanResult(
            success=True, message=f"Schedule plan '{plan.label}' retrieved", plan=plan
        )
    except BridgeError as e:
        return GetSchedulePlanResult(success=False, message=str(e), error_code=e.code)
    except Exception as e:
        return GetSchedulePlanResult(success=False, message=f"get_schedule_plan failed: {e}")


# ============================================================================
# list_schedule_plans
# ============================================================================


@activity.defn
async def list_schedule_plans(request: ListSchedulePlansRequest) -> ListSchedulePlansResult:
    """All plans of a study, oldest first. Called by manager workflows."""
    try:
        plans = await SchedulePlanStore(get_client()).list(request.study_id)
        return ListSchedulePlansResult(
            success=True,
            message=f"Found {len(plans)} schedule plan(s) in {request.study_id}",
            plans=plans,
        )
    except Exception as e:
        return ListSchedulePlansResult(
            success=False, message=f"list_schedule_plans failed: {e}"
        )


# ============================================================================
# delete_schedule_plan
# ============================================================================


@activity.defn
async def delete_schedule_plan(request: DeleteSchedulePlanRequest) -> DeleteSchedulePlanResult:
    """Remove a plan. Materialized activities are kept."""
    try:
        require_role(request.caller, DEVELOPER)
        await SchedulePlanStore(get_client()).delete(request.guid, request.caller.study_id)
        return DeleteSchedulePlanResult(
            success=True, message=f"Schedule plan {request.guid} deleted", guid=request.guid
        )
    except BridgeError as e:
        return DeleteSchedulePlanResult(success=False, message=str(e), error_code=e.code)
    except Exception as e:
        return DeleteSchedulePlanResult(
            success=False, message=f"delete_schedule_plan failed: {e}"
        )


# ============================================================================
# create_or_update_upload_schema
# ============================================================================


@activity.defn
async def create_or_update_upload_schema(
    request: CreateOrUpdateUploadSchemaRequest,
) -> UploadSchemaResult:
    """Store a new revision of an upload schema, guarded by optimistic concurrency."""
    try:
        require_role(request.caller, DEVELOPER)
        schema = request.schema_def.model_copy(update={"study_id": request.caller.study_id})
        stored = await UploadSchemaStore(get_client()).create_or_update(schema)
        return UploadSchemaResult(
            success=True,
            message=f"Upload schema {stored.schema_id} revision {stored.revision} stored",
            schema_def=stored,
        )
    except BridgeError as e:
        return UploadSchemaResult(success=False, message=str(e), error_code=e.code)
    except Exception as e:
        return UploadSchemaResult(
            success=False, message=f"create_or_update_upload_schema failed: {e}"
        )


# ============================================================================
# get_upload_schema
# ============================================================================


@activity.defn
async def get_upload_schema(request: GetUploadSchemaRequest) -> UploadSchemaListResult:
    """Every revision of one schema ID."""
    try:
        require_role(request.caller, DEVELOPER)
        items = await UploadSchemaStore(get_client()).get_all_revisions(
            request.caller.study_id, request.schema_id
        )
        return UploadSchemaListResult(
            success=True,
            message=f"Found {len(items)} revision(s) of upload schema {request.schema_id}",
            items=items,
        )
    except BridgeError as e:
        return UploadSchemaListResult(success=False, message=str(e), error_code=e.code)
    except Exception as e:
        return UploadSchemaListResult(success=False, message=f"get_upload_schema failed: {e}")


# ============================================================================
# get_most_recent_upload_schema
# ============================================================================


@activity.defn
async def get_most_recent_upload_schema(request: GetUploadSchemaRequest) -> UploadSchemaResult:
    try:
        require_role(request.caller, DEVELOPER)
        schema = await UploadSchemaStore(get_client()).get_most_recent(
            request.caller.study_id, request.schema_id
        )
        return UploadSchemaResult(
            success=True,
            message=f"Upload schema {schema.schema_id} is at revision {schema.revision}",
            schema_def=schema,
        )
    except BridgeError as e:
        return UploadSchemaResult(success=False, message=str(e), error_code=e.code)
    except Exception as e:
        return UploadSchemaResult(
            success=False, message=f"get_most_recent_upload_schema failed: {e}"
        )


# ============================================================================
# get_upload_schema_revision
# ============================================================================


@activity.defn
async def get_upload_schema_revision(request: GetUploadSchemaRevisionRequest) -> UploadSchemaResult:
    try:
        require_role(request.caller, DEVELOPER)
        schema = await UploadSchemaStore(get_client()).get_revision(
            request.caller.study_id, request.schema_id, request.revision
        )
        return UploadSchemaResult(
            success=True,
            message=f"Upload schema {schema.schema_id} revision {schema.revision} retrieved",
            schema_def=schema,
        )
    except BridgeError as e:
        return UploadSchemaResult(success=False, message=str(e), error_code=e.code)
    except Exception as e:
        return UploadSchemaResult(
            success=False, message=f"get_upload_schema_revision failed: {e}"
        )


# ============================================================================
# list_upload_schemas
# ============================================================================


@activity.defn
async def list_upload_schemas(request: ListUploadSchemasRequest) -> UploadSchemaListResult:
    """Most recent revision of every schema in the caller's study."""
    try:
        require_role(request.caller, DEVELOPER)
        items = await UploadSchemaStore(get_client()).list_all(request.caller.study_id)
        return UploadSchemaListResult(
            success=True, message=f"Found {len(items)} upload schema(s)", items=items
        )
    except BridgeError as e:
        return UploadSchemaListResult(success=False, message=str(e), error_code=e.code)
    except Exception as e:
        return UploadSchemaListResult(success=False, message=f"list_upload_schemas failed: {e}")


# ============================================================================
# delete_upload_schema_revision
# ============================================================================


@activity.defn
async def delete_upload_schema_revision(
    request: DeleteUploadSchemaRevisionRequest,
) -> DeleteUploadSchemaResult:
    try:
        require_role(request.caller, DEVELOPER)
        await UploadSchemaStore(get_client()).delete_revision(
            request.caller.study_id, request.schema_id, request.revision
        )
        return DeleteUploadSchemaResult(
            success=True,
            message=f"Upload schema {request.schema_id} revision {request.revision} deleted",
            deleted_count=1,
        )
    except BridgeError as e:
        return DeleteUploadSchemaResult(success=False, message=str(e), error_code=e.code)
    except Exception as e:
        return DeleteUploadSchemaResult(
            success=False, message=f"delete_upload_schema_revision failed: {e}"
        )


# ============================================================================
# delete_upload_schema_all_revisions
# ============================================================================


@activity.defn
async def delete_upload_schema_all_revisions(
    request: DeleteUploadSchemaRequest,
) -> DeleteUploadSchemaResult:
    try:
        require_role(request.caller, DEVELOPER)
        count = await UploadSchemaStore(get_client()).delete_all_revisions(
            request.caller.study_id, request.schema_id
        )
        return DeleteUploadSchemaResult(
            success=True,
            message=f"Upload schema {request.schema_id} deleted ({count} revision(s))",
            deleted_count=count,
        )
    except BridgeError as e:
        return DeleteUploadSchemaResult(success=False, message=str(e), error_code=e.code)
    except Exception as e:
        return DeleteUploadSchemaResult(
            success=False, message=f"delete_upload_schema_all_revisions failed: {e}"
        )
