"""Scheduled activity state store and history pagination.

Instances are materialized lazily: the Schedule Engine regenerates the same
occurrences (with the same deterministic GUIDs) on every query, and this
store keeps the first write of each one. Participant state (started_on,
finished_on, client_data) lives only here, so it survives regeneration.

Status is never stored. Every read projects it from the timestamps at the
caller's `now`.

History indexes (per participant, scored by scheduled_on) are kept by
activity GUID and by task identifier.
A history page loads the window from one index, orders it by
(scheduled_on, guid) and resumes strictly after the cursor.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta, tzinfo

from bridge_shared.activity_models import (
    ForwardCursorScheduledActivityList,
    HistoryRequestParams,
    ScheduledActivityUpdate,
)
from bridge_shared.errors import EntityNotFoundError, InvalidEntityError
from bridge_shared.redis_client import RedisAdapter
from bridge_shared.schedule_models import ScheduledActivity

from bridge_activity_access.cursors import decode_cursor, encode_cursor
from bridge_activity_access.keys import (
    enrollment_key,
    history_idx_activity,
    history_idx_task,
    instance_key,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MIN_PAGE_SIZE = 5
MAX_PAGE_SIZE = 100
DEFAULT_HISTORY_WINDOW = timedelta(days=14)


def resolve_history_params(
    *,
    scheduled_on_start: datetime | None,
    scheduled_on_end: datetime | None,
    page_size: int | None,
    offset_key: str | None,
    now: datetime,
) -> HistoryRequestParams:
    """Apply history defaults and limits. Naive datetimes are taken as UTC."""
    start = _aware(scheduled_on_start)
    end = _aware(scheduled_on_end)
    if start is None and end is None:
        end = now
    if end is None:
        end = start + DEFAULT_HISTORY_WINDOW
    if start is None:
        start = end - DEFAULT_HISTORY_WINDOW
    if end < start:
        raise InvalidEntityError("scheduled_on_end must not be before scheduled_on_start")

    size = DEFAULT_PAGE_SIZE if page_size is None else page_size
    if not MIN_PAGE_SIZE <= size <= MAX_PAGE_SIZE:
        raise InvalidEntityError(
            f"page_size must be from {MIN_PAGE_SIZE} to {MAX_PAGE_SIZE}, not {size}"
        )

    return HistoryRequestParams(
        scheduled_on_start=start,
        scheduled_on_end=end,
        page_size=size,
        offset_key=offset_key,
    )


class ScheduledActivityStore:
    def __init__(self, client: RedisAdapter) -> None:
        self._client = client

    # ------------------------------------------------------------------
    # Enrollment
    # ------------------------------------------------------------------

    async def record_enrollment(
        self, user_id: str, study_id: str, enrolled_on: datetime
    ) -> datetime:
        """Store the enrollment time if none exists; return the stored one."""
        key = enrollment_key(study_id, user_id)
        if await self._client.set(key, enrolled_on.isoformat(), nx=True):
            logger.info(f"Recorded enrollment of {user_id} in {study_id} at {enrolled_on}")
            return enrolled_on
        stored = await self._client.get(key)
        return datetime.fromisoformat(stored) if stored else enrolled_on

    # ------------------------------------------------------------------
    # Materialization and updates
    # ------------------------------------------------------------------

    async def materialize(
        self,
        user_id: str,
        generated: list[ScheduledActivity],
        now: datetime,
        zone: tzinfo | None = None,
    ) -> list[ScheduledActivity]:
        """Persist new instances and return the stored version of every one."""
        if not generated:
            return []

        created = 0
        for scheduled in generated:
            if await self._client.set(
                instance_key(user_id, scheduled.guid), scheduled.storage_json(), nx=True
            ):
                created += 1

        tx = self._client.multi()
        for scheduled in generated:
            score = scheduled.scheduled_on.timestamp()
            for index in _history_indexes(user_id, scheduled):
                tx.zadd(index, {scheduled.guid: score})
        await tx.execute()

        raws = await self._client.mget(*[instance_key(user_id, s.guid) for s in generated])
        stored = [
            ScheduledActivity.model_validate_json(raw) if raw is not None else scheduled
            for scheduled, raw in zip(generated, raws, strict=True)
        ]
        if created:
            logger.info(f"Materialized {created} new scheduled activities for {user_id}")
        return [s.with_status(now, zone) for s in stored]

    async def update(self, user_id: str, updates: list[ScheduledActivityUpdate]) -> int:
        """Merge client updates by GUID. All GUIDs must exist or nothing is written."""
        if not updates:
            return 0

        guids = list(dict.fromkeys(u.guid for u in updates))
        raws = await self._client.mget(*[instance_key(user_id, g) for g in guids])
        current: dict[str, ScheduledActivity] = {}
        for guid, raw in zip(guids, raws, strict=True):
            if raw is None:
                raise EntityNotFoundError("ScheduledActivity", guid)
            current[guid] = ScheduledActivity.model_validate_json(raw)

        for update in updates:
            current[update.guid] = current[update.guid].model_copy(
                update={name: getattr(update, name) for name in update.changed_fields}
            )

        tx = self._client.multi()
        for guid, scheduled in current.items():
            tx.set(instance_key(user_id, guid), scheduled.storage_json())
        await tx.execute()

        logger.info(f"Updated {len(current)} scheduled activities for {user_id}")
        return len(current)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def activity_history(
        self, user_id: str, activity_guid: str, params: HistoryRequestParams, now: datetime
    ) -> ForwardCursorScheduledActivityList:
        return await self._page(history_idx_activity(user_id, activity_guid), user_id, params, now)

    async def task_history(
        self, user_id: str, task_identifier: str, params: HistoryRequestParams, now: datetime
    ) -> ForwardCursorScheduledActivityList:
        return await self._page(history_idx_task(user_id, task_identifier), user_id, params, now)

    async def _page(
        self, index: str, user_id: str, params: HistoryRequestParams, now: datetime
    ) -> ForwardCursorScheduledActivityList:
        start, end = params.scheduled_on_start, params.scheduled_on_end
        after = decode_cursor(params.offset_key) if params.offset_key else None

        guids = await self._client.zrangebyscore(index, start.timestamp(), end.timestamp())
        raws = await self._client.mget(*[instance_key(user_id, g) for g in guids])
        items = sorted(
            (ScheduledActivity.model_validate_json(raw) for raw in raws if raw is not None),
            key=_sort_key,
        )
        if after is not None:
            items = [item for item in items if _sort_key(item) > after]

        page = items[: params.page_size]
        has_next = len(items) > params.page_size
        next_key = encode_cursor(page[-1].scheduled_on, page[-1].guid) if has_next else None

        return ForwardCursorScheduledActivityList(
            items=[item.with_status(now, start.tzinfo) for item in page],
            next_page_offset_key=next_key,
            has_next=has_next,
            request_params=params,
        )


def _history_indexes(user_id: str, scheduled: ScheduledActivity) -> list[str]:
    indexes = []
    if scheduled.activity.guid:
        indexes.append(history_idx_activity(user_id, scheduled.activity.guid))
    if scheduled.activity.task_identifier:
        indexes.append(history_idx_task(user_id, scheduled.activity.task_identifier))
    return indexes


def _sort_key(item: ScheduledActivity) -> tuple[float, str]:
    return item.scheduled_on.timestamp(), item.guid


def _aware(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
