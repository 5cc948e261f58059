"""Tests for Activity Access activities: result envelopes and authorization.

Pattern: unittest.mock.patch("bridge_activity_access.activities.get_client")
returns the fakeredis-backed adapter from conftest.
"""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import patch

import pytest
from bridge_activity_access.keys import instance_key
from bridge_shared.activity_models import (
    ActivityHistoryRequest,
    MaterializeActivitiesRequest,
    ParticipantActivityHistoryRequest,
    RecordEnrollmentRequest,
    ScheduledActivityUpdate,
    TaskHistoryRequest,
    UpdateScheduledActivitiesRequest,
)
from bridge_shared.schedule_models import ScheduledActivity
from temporalio.contrib.pydantic import pydantic_data_converter

PATCH_TARGET = "bridge_activity_access.activities.get_client"
START = datetime(2026, 3, 2, tzinfo=UTC)
END = datetime(2026, 3, 5, tzinfo=UTC)


def _over_the_wire(request):
    """Encode and decode the way a Temporal worker receives the request."""
    converter = pydantic_data_converter.payload_converter
    [decoded] = converter.from_payloads(converter.to_payloads([request]), [type(request)])
    return decoded


async def _materialize(redis, instances, now, user_id="user-1"):
    from bridge_activity_access.activities import materialize_activities

    with patch(PATCH_TARGET, return_value=redis):
        return await materialize_activities(
            MaterializeActivitiesRequest(user_id=user_id, activities=instances, now=now)
        )


# ============================================================================
# record_enrollment / materialize_activities
# ============================================================================


class TestEnrollmentAndMaterialize:
    @pytest.mark.asyncio
    async def test_record_enrollment(self, redis):
        from bridge_activity_access.activities import record_enrollment

        enrolled_on = datetime(2026, 3, 2, 8, 30, tzinfo=UTC)
        with patch(PATCH_TARGET, return_value=redis):
            result = await record_enrollment(
                RecordEnrollmentRequest(user_id="user-1", enrolled_on=enrolled_on)
            )

        assert result.success is True
        assert result.enrolled_on == enrolled_on

    @pytest.mark.asyncio
    async def test_materialize(self, redis, twelve_instances, now):
        result = await _materialize(redis, twelve_instances, now)

        assert result.success is True
        assert len(result.activities) == 12
        assert result.message == "Materialized 12 activities for user-1"

    @pytest.mark.asyncio
    async def test_bad_time_zone(self, redis, twelve_instances, now):
        from bridge_activity_access.activities import materialize_activities

        with patch(PATCH_TARGET, return_value=redis):
            result = await materialize_activities(
                MaterializeActivitiesRequest(
                    user_id="user-1", activities=twelve_instances, now=now, time_zone="Mars/Olympus"
                )
            )

        assert result.success is False
        assert result.message.startswith("materialize_activities failed:")


# ============================================================================
# update_scheduled_activities
# ============================================================================


class TestUpdateScheduledActivities:
    @pytest.mark.asyncio
    async def test_updates_callers_activities(self, redis, participant, twelve_instances, now):
        from bridge_activity_access.activities import update_scheduled_activities

        await _materialize(redis, twelve_instances, now)
        with patch(PATCH_TARGET, return_value=redis):
            result = await update_scheduled_activities(
                UpdateScheduledActivitiesRequest(
                    caller=participant,
                    updates=[
                        ScheduledActivityUpdate(guid=twelve_instances[0].guid, started_on=now),
                        ScheduledActivityUpdate(guid=twelve_instances[1].guid, finished_on=now),
                    ],
                )
            )

        assert result.success is True
        assert result.updated_count == 2

    @pytest.mark.asyncio
    async def test_partial_updates_survive_serialization(
        self, redis, participant, twelve_instances, now
    ):
        from bridge_activity_access.activities import update_scheduled_activities

        guid = twelve_instances[0].guid
        await _materialize(redis, twelve_instances, now)
        started = _over_the_wire(
            UpdateScheduledActivitiesRequest(
                caller=participant,
                updates=[ScheduledActivityUpdate(guid=guid, started_on=now, client_data={"a": 1})],
            )
        )
        finished = _over_the_wire(
            UpdateScheduledActivitiesRequest(
                caller=participant,
                updates=[ScheduledActivityUpdate(guid=guid, finished_on=now)],
            )
        )
        with patch(PATCH_TARGET, return_value=redis):
            assert (await update_scheduled_activities(started)).success is True
            assert (await update_scheduled_activities(finished)).success is True

        stored = ScheduledActivity.model_validate_json(
            await redis.get(instance_key("user-1", guid))
        )
        assert finished.updates[0].changed_fields == ["finished_on"]
        assert stored.started_on == now
        assert stored.finished_on == now
        assert stored.client_data == {"a": 1}

    @pytest.mark.asyncio
    async def test_unknown_guid(self, redis, participant):
        from bridge_activity_access.activities import update_scheduled_activities

        with patch(PATCH_TARGET, return_value=redis):
            result = await update_scheduled_activities(
                UpdateScheduledActivitiesRequest(
                    caller=participant, updates=[ScheduledActivityUpdate(guid="missing")]
                )
            )

        assert result.success is False
        assert result.error_code == "not_found"
        assert result.message == "ScheduledActivity not found: missing"


# ============================================================================
# History verbs
# ============================================================================


class TestHistory:
    @pytest.mark.asyncio
    async def test_activity_history_echoes_params(self, redis, participant, twelve_instances, now):
        from bridge_activity_access.activities import get_activity_history

        await _materialize(redis, twelve_instances, now)
        with patch(PATCH_TARGET, return_value=redis):
            result = await get_activity_history(
                ActivityHistoryRequest(
                    caller=participant,
                    activity_guid="act-tap",
                    scheduled_on_start=START,
                    scheduled_on_end=END,
                    page_size=5,
                )
            )

        assert result.success is True
        assert len(result.page.items) == 5
        assert result.page.has_next is True
        assert result.page.request_params.scheduled_on_start == START
        assert result.page.request_params.scheduled_on_end == END
        assert result.page.request_params.page_size == 5

    @pytest.mark.asyncio
    async def test_task_history_page_size_limit(self, redis, participant):
        from bridge_activity_access.activities import get_task_history

        with patch(PATCH_TARGET, return_value=redis):
            result = await get_task_history(
                TaskHistoryRequest(
                    caller=participant, task_identifier="task:AAA", page_size=500
                )
            )

        assert result.success is False
        assert result.error_code == "invalid_entity"
        assert result.page is None

    @pytest.mark.asyncio
    async def test_task_history(self, redis, participant, twelve_instances, now):
        from bridge_activity_access.activities import get_task_history

        await _materialize(redis, twelve_instances, now)
        with patch(PATCH_TARGET, return_value=redis):
            result = await get_task_history(
                TaskHistoryRequest(
                    caller=participant,
                    task_identifier="task:AAA",
                    scheduled_on_start=START,
                    scheduled_on_end=END,
                )
            )

        assert result.success is True
        assert len(result.page.items) == 12
        assert result.page.next_page_offset_key is None

    @pytest.mark.asyncio
    async def test_researcher_sees_participant_history(
        self, redis, researcher, twelve_instances, now
    ):
        from bridge_activity_access.activities import get_participant_activity_history

        await _materialize(redis, twelve_instances, now)
        with patch(PATCH_TARGET, return_value=redis):
            result = await get_participant_activity_history(
                ParticipantActivityHistoryRequest(
                    caller=researcher,
                    user_id="user-1",
                    activity_guid="act-tap",
                    scheduled_on_start=START,
                    scheduled_on_end=END,
                    page_size=20,
                )
            )

        assert result.success is True
        assert len(result.page.items) == 12

    @pytest.mark.asyncio
    async def test_participant_cannot_read_others_history(self, redis, participant):
        from bridge_activity_access.activities import get_participant_activity_history

        with patch(PATCH_TARGET, return_value=redis):
            result = await get_participant_activity_history(
                ParticipantActivityHistoryRequest(
                    caller=participant, user_id="user-2", activity_guid="act-tap"
                )
            )

        assert result.success is False
        assert result.error_code == "unauthorized"
        assert result.page is None
