"""Error taxonomy for the Bridge platform.

Stores and engines raise these; activities translate them into failed
PlatformResult envelopes carrying the error code. The codes are stable strings
so workflows (and callers outside Python) can branch on them.
"""


class BridgeError(Exception):
    """Base class for expected business failures."""

    code = "bridge_error"


class EntityNotFoundError(BridgeError):
    """The plan, schema revision or scheduled activity does not exist."""

    code = "not_found"

    def __init__(self, entity_type: str, entity_id: str) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found: {entity_id}")


class UnauthorizedError(BridgeError):
    """The caller lacks the role required for the resource."""

    code = "unauthorized"


class ConcurrentModificationError(BridgeError):
    """Optimistic-concurrency check failed, re-fetch and retry."""

    code = "concurrent_modification"


class InvalidEntityError(BridgeError):
    """Malformed schedule, query parameters or cursor."""

    code = "invalid_entity"
