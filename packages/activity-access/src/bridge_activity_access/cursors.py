"""Opaque history cursors.

A cursor marks the last item of a page by (scheduled_on, guid), the same key
the history is sorted by. Resuming "strictly after the cursor" instead of at
an offset keeps pages gap-free and duplicate-free even when instances are
materialized between calls.
"""

from __future__ import annotations

import base64
import binascii
import json
from datetime import datetime

from bridge_shared.errors import InvalidEntityError


def encode_cursor(scheduled_on: datetime, guid: str) -> str:
    payload = json.dumps([scheduled_on.timestamp(), guid], separators=(",", ":"))
    return base64.urlsafe_b64encode(payload.encode()).decode()


def decode_cursor(offset_key: str) -> tuple[float, str]:
    """Return (epoch seconds, guid). Raises InvalidEntityError when malformed."""
    try:
        timestamp, guid = json.loads(base64.urlsafe_b64decode(offset_key.encode()))
    except (binascii.Error, UnicodeDecodeError, ValueError, TypeError) as e:
        raise InvalidEntityError(f"Invalid offset key: {offset_key!r}") from e
    if not isinstance(timestamp, int | float) or not isinstance(guid, str):
        raise InvalidEntityError(f"Invalid offset key: {offset_key!r}")
    return float(timestamp), guid
