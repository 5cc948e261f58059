"""Redis key patterns for Study Access.

All keys use the `study:` prefix. JSON strings for objects, sorted sets + sets
for indexes. Key functions are pure: they compute key names, never touch Redis.

Righting Software test: if we switched to PostgreSQL, these would become table/column
names. The naming reflects domain concepts (plan, schema, revision), not
Redis-specific concepts (hash, zset).
"""


# ============================================================================
# Schedule plan keys
# ============================================================================


def plan_key(guid: str) -> str:
    """Schedule plan definition."""
    return f"study:plan:{guid}"


def plan_idx_study(study_id: str) -> str:
    """Sorted set of plan GUIDs in a study (score = creation timestamp)."""
    return f"study:plan:idx:study:{study_id}"


# ============================================================================
# Upload schema keys
# ============================================================================


def schema_revision_key(study_id: str, schema_id: str, revision: int) -> str:
    """Immutable revision of an upload schema."""
    return f"study:schema:{study_id}:{schema_id}:r{revision}"


def schema_revisions_key(study_id: str, schema_id: str) -> str:
    """Sorted set of stored revision numbers of a schema (score = revision)."""
    return f"study:schema:{study_id}:{schema_id}:revs"


def schema_idx_study(study_id: str) -> str:
    """Set of schema IDs with at least one stored revision in a study."""
    return f"study:schema:idx:study:{study_id}"
