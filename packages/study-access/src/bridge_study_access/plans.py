"""Schedule plan store.

Plans are stored whole as JSON and indexed per study in creation order.
There is no in-place update: a changed plan is deleted and created again.
Deleting a plan leaves materialized scheduled activities alone, so a
participant's history survives plan changes.
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime

from bridge_shared.errors import EntityNotFoundError
from bridge_shared.redis_client import RedisAdapter
from bridge_shared.schedule_models import (
    ABTestScheduleStrategy,
    Schedule,
    SchedulePlan,
    SimpleScheduleStrategy,
)

from bridge_study_access.keys import plan_idx_study, plan_key

logger = logging.getLogger(__name__)


class SchedulePlanStore:
    def __init__(self, client: RedisAdapter) -> None:
        self._client = client

    async def create(self, plan: SchedulePlan, now: datetime | None = None) -> SchedulePlan:
        """Assign identity and timestamps, then store the plan."""
        now = now or datetime.now(UTC)
        stored = plan.model_copy(
            update={
                "guid": str(uuid.uuid4()),
                "version": 1,
                "created_on": now,
                "modified_on": now,
                "strategy": _with_activity_guids(plan.strategy),
            }
        )

        tx = self._client.multi()
        tx.set(plan_key(stored.guid), stored.model_dump_json())
        tx.zadd(plan_idx_study(stored.study_id), {stored.guid: now.timestamp()})
        await tx.execute()

        logger.info(f"Created schedule plan {stored.guid} '{stored.label}' in {stored.study_id}")
        return stored

    async def get(self, guid: str, study_id: str | None = None) -> SchedulePlan:
        """Load one plan. A plan of another study counts as missing."""
        raw = await self._client.get(plan_key(guid))
        if raw is None:
            raise EntityNotFoundError("SchedulePlan", guid)
        plan = SchedulePlan.model_validate_json(raw)
        if study_id is not None and plan.study_id != study_id:
            raise EntityNotFoundError("SchedulePlan", guid)
        return plan

    async def list(self, study_id: str) -> list[SchedulePlan]:
        guids = await self._client.zrange(plan_idx_study(study_id), 0, -1)
        raws = await self._client.mget(*[plan_key(g) for g in guids])
        return [SchedulePlan.model_validate_json(raw) for raw in raws if raw is not None]

    async def delete(self, guid: str, study_id: str | None = None) -> None:
        plan = await self.get(guid, study_id)

        tx = self._client.multi()
        tx.delete(plan_key(guid))
        tx.zrem(plan_idx_study(plan.study_id), guid)
        await tx.execute()

        logger.info(f"Deleted schedule plan {guid} from {plan.study_id}")


def _with_activity_guids(
    strategy: SimpleScheduleStrategy | ABTestScheduleStrategy,
) -> SimpleScheduleStrategy | ABTestScheduleStrategy:
    if isinstance(strategy, SimpleScheduleStrategy):
        return strategy.model_copy(update={"schedule": _schedule_with_guids(strategy.schedule)})
    groups = [
        group.model_copy(update={"schedule": _schedule_with_guids(group.schedule)})
        for group in strategy.groups
    ]
    return strategy.model_copy(update={"groups": groups})


def _schedule_with_guids(schedule: Schedule) -> Schedule:
    activities = [
        activity if activity.guid else activity.model_copy(update={"guid": str(uuid.uuid4())})
        for activity in schedule.activities
    ]
    return schedule.model_copy(update={"activities": activities})
