"""Upload schema revision store.

A schema ID owns a monotonically increasing sequence of immutable revisions.
Every create_or_update writes a brand-new revision row; nothing is ever
overwritten.

Concurrency model: the new revision row is written with SET NX. Two writers
that read the same base revision both target the same new revision number,
so exactly one of them wins and the other gets ConcurrentModificationError.
Submissions that name a base revision (and optionally the version token read
with it) are checked against the stored row first, so a stale base fails
before anything is written.

Key layout (see keys.py):
    study:schema:{study}:{schema}:r{n}   one revision (JSON)
    study:schema:{study}:{schema}:revs   revision numbers (zset, score = n)
    study:schema:idx:study:{study}       schema IDs with any revision (set)
"""

from __future__ import annotations

import logging

from bridge_shared.errors import ConcurrentModificationError, EntityNotFoundError
from bridge_shared.redis_client import RedisAdapter
from bridge_shared.study_models import UploadSchema

from bridge_study_access.keys import (
    schema_idx_study,
    schema_revision_key,
    schema_revisions_key,
)

logger = logging.getLogger(__name__)

# Version token stamped on every stored revision. Rows are immutable, so the
# token never advances; it only has to match what the caller read.
STORED_VERSION = 1


class UploadSchemaStore:
    def __init__(self, client: RedisAdapter) -> None:
        self._client = client

    async def create_or_update(self, schema: UploadSchema) -> UploadSchema:
        """Store the submission as the next revision.

        - No revision and no version: appended as max + 1 (revision 1 for a new ID).
          An unrevisioned resubmission of an existing ID never conflicts, even
          when it repeats the stored content. Callers that need the conflict
          check send the revision (or version) they read.
        - Revision r: the stored row r must exist and match the version token
          when one is given; the result is revision r + 1.
        - Version only: checked against the most recent revision.
        """
        study_id, schema_id = schema.study_id, schema.schema_id
        current = await self._max_revision(study_id, schema_id)

        if schema.revision is None and schema.version is None:
            base = current
        else:
            base = schema.revision if schema.revision is not None else current
            await self._check_base(schema, base, current)

        revision = base + 1
        stored = schema.model_copy(update={"revision": revision, "version": STORED_VERSION})
        written = await self._client.set(
            schema_revision_key(study_id, schema_id, revision), stored.model_dump_json(), nx=True
        )
        if not written:
            raise ConcurrentModificationError(
                f"Upload schema {schema_id} revision {revision} was written concurrently; "
                "re-fetch and retry"
            )

        tx = self._client.multi()
        tx.zadd(schema_revisions_key(study_id, schema_id), {str(revision): revision})
        tx.sadd(schema_idx_study(study_id), schema_id)
        await tx.execute()

        logger.info(f"Stored upload schema {schema_id} revision {revision} in {study_id}")
        return stored

    async def get_all_revisions(self, study_id: str, schema_id: str) -> list[UploadSchema]:
        """Every stored revision, oldest first."""
        revisions = await self._client.zrange(schema_revisions_key(study_id, schema_id), 0, -1)
        raws = await self._client.mget(
            *[schema_revision_key(study_id, schema_id, int(r)) for r in revisions]
        )
        schemas = [UploadSchema.model_validate_json(raw) for raw in raws if raw is not None]
        if not schemas:
            raise EntityNotFoundError("UploadSchema", schema_id)
        return schemas

    async def get_most_recent(self, study_id: str, schema_id: str) -> UploadSchema:
        revision = await self._max_revision(study_id, schema_id)
        if revision == 0:
            raise EntityNotFoundError("UploadSchema", schema_id)
        return await self.get_revision(study_id, schema_id, revision)

    async def get_revision(self, study_id: str, schema_id: str, revision: int) -> UploadSchema:
        raw = await self._client.get(schema_revision_key(study_id, schema_id, revision))
        if raw is None:
            raise EntityNotFoundError("UploadSchema", f"{schema_id} revision {revision}")
        return UploadSchema.model_validate_json(raw)

    async def list_all(self, study_id: str) -> list[UploadSchema]:
        """Most recent revision of every schema in the study, by schema ID."""
        schemas = []
        for schema_id in sorted(await self._client.smembers(schema_idx_study(study_id))):
            revision = await self._max_revision(study_id, schema_id)
            if revision == 0:
                continue
            raw = await self._client.get(schema_revision_key(study_id, schema_id, revision))
            if raw is not None:
                schemas.append(UploadSchema.model_validate_json(raw))
        return schemas

    async def delete_revision(self, study_id: str, schema_id: str, revision: int) -> None:
        key = schema_revision_key(study_id, schema_id, revision)
        if await self._client.get(key) is None:
            raise EntityNotFoundError("UploadSchema", f"{schema_id} revision {revision}")

        revisions_key = schema_revisions_key(study_id, schema_id)
        tx = self._client.multi()
        tx.delete(key)
        tx.zrem(revisions_key, str(revision))
        await tx.execute()

        if await self._client.zcard(revisions_key) == 0:
            await self._client.srem(schema_idx_study(study_id), schema_id)
        logger.info(f"Deleted upload schema {schema_id} revision {revision} from {study_id}")

    async def delete_all_revisions(self, study_id: str, schema_id: str) -> int:
        """Remove the schema ID entirely. Returns how many revisions were deleted."""
        revisions_key = schema_revisions_key(study_id, schema_id)
        revisions = await self._client.zrange(revisions_key, 0, -1)
        if not revisions:
            raise EntityNotFoundError("UploadSchema", schema_id)

        tx = self._client.multi()
        tx.delete(*[schema_revision_key(study_id, schema_id, int(r)) for r in revisions])
        tx.delete(revisions_key)
        tx.srem(schema_idx_study(study_id), schema_id)
        await tx.execute()

        logger.info(f"Deleted {len(revisions)} revision(s) of upload schema {schema_id}")
        return len(revisions)

    async def _max_revision(self, study_id: str, schema_id: str) -> int:
        latest = await self._client.zrange(schema_revisions_key(study_id, schema_id), -1, -1)
        return int(latest[0]) if latest else 0

    async def _check_base(self, schema: UploadSchema, base: int, current: int) -> None:
        if base == 0:
            if current != 0 or schema.version is not None:
                raise ConcurrentModificationError(
                    f"Upload schema {schema.schema_id} already exists; submit the revision "
                    "you are updating"
                )
            return

        raw = await self._client.get(schema_revision_key(schema.study_id, schema.schema_id, base))
        if raw is None:
            raise ConcurrentModificationError(
                f"Upload schema {schema.schema_id} revision {base} does not exist"
            )
        stored = UploadSchema.model_validate_json(raw)
        if schema.version is not None and schema.version != stored.version:
            raise ConcurrentModificationError(
                f"Upload schema {schema.schema_id} revision {base} has version "
                f"{stored.version}, not {schema.version}"
            )
