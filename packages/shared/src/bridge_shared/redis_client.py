"""Redis client adapter shared by the Study Access and Activity Access components.

Normalizes the interface between Upstash SDK (cloud) and fakeredis (local dev).
Both support get/set/zadd/sadd etc., but differ in a few places:
  - Upstash: multi() → tx.exec(); zadd takes {"member", "score"} dicts
  - redis-py/fakeredis: pipeline(transaction=True) → pipe.execute()

The RedisAdapter wraps these differences so stores never touch raw clients.

Environment detection:
  - UPSTASH_REDIS_REST_URL set → Upstash SDK (staging/prod)
  - Otherwise → fakeredis (local dev, no Docker, no cloud dependency)

Usage in activities:
    from bridge_shared.redis_client import get_client

    client = get_client()
    created = await client.set("study:plan:123", json_str, nx=True)
"""

from __future__ import annotations

import os
from typing import Any


def _decode(value: Any) -> str:
    return value if isinstance(value, str) else value.decode()


class RedisTransaction:
    """Wraps either an Upstash multi or a fakeredis pipeline for uniform tx API."""

    def __init__(self, raw_tx: Any, is_upstash: bool) -> None:
        self._tx = raw_tx
        self._is_upstash = is_upstash

    def set(self, key: str, value: str) -> RedisTransaction:
        self._tx.set(key, value)
        return self

    def delete(self, *keys: str) -> RedisTransaction:
        self._tx.delete(*keys)
        return self

    def zadd(self, key: str, mapping: dict[str, float]) -> RedisTransaction:
        if self._is_upstash:
            for member, score in mapping.items():
                self._tx.zadd(key, {"member": member, "score": score})
        else:
            self._tx.zadd(key, mapping)
        return self

    def zrem(self, key: str, *members: str) -> RedisTransaction:
        self._tx.zrem(key, *members)
        return self

    def sadd(self, key: str, *members: str) -> RedisTransaction:
        self._tx.sadd(key, *members)
        return self

    def srem(self, key: str, *members: str) -> RedisTransaction:
        self._tx.srem(key, *members)
        return self

    async def execute(self) -> list[Any]:
        if self._is_upstash:
            return await self._tx.exec()
        return await self._tx.execute()


class RedisAdapter:
    """Unified async Redis interface over Upstash SDK or fakeredis."""

    def __init__(self, raw_client: Any, is_upstash: bool = False) -> None:
        self._client = raw_client
        self._is_upstash = is_upstash

    async def get(self, key: str) -> str | None:
        value = await self._client.get(key)
        return None if value is None else _decode(value)

    async def mget(self, *keys: str) -> list[str | None]:
        if not keys:
            return []
        values = await self._client.mget(*keys)
        return [None if v is None else _decode(v) for v in values]

    async def set(self, key: str, value: str, nx: bool = False) -> bool:
        """SET the key; with nx=True only when absent. Returns whether it was written."""
        if nx:
            result = await self._client.set(key, value, nx=True)
        else:
            result = await self._client.set(key, value)
        return bool(result)

    async def delete(self, *keys: str) -> None:
        await self._client.delete(*keys)

    async def zadd(self, key: str, mapping: dict[str, float]) -> None:
        if self._is_upstash:
            for member, score in mapping.items():
                await self._client.zadd(key, {"member": member, "score": score})
        else:
            await self._client.zadd(key, mapping)

    async def zrem(self, key: str, *members: str) -> None:
        await self._client.zrem(key, *members)

    async def zrangebyscore(self, key: str, min_score: float, max_score: float) -> list[str]:
        result = await self._client.zrangebyscore(key, min_score, max_score)
        return [_decode(r) for r in (result or [])]

    async def zrange(self, key: str, start: int, stop: int) -> list[str]:
        result = await self._client.zrange(key, start, stop)
        return [_decode(r) for r in (result or [])]

    async def zcard(self, key: str) -> int:
        return await self._client.zcard(key) or 0

    async def sadd(self, key: str, *members: str) -> None:
        await self._client.sadd(key, *members)

    async def srem(self, key: str, *members: str) -> None:
        await self._client.srem(key, *members)

    async def smembers(self, key: str) -> set[str]:
        result = await self._client.smembers(key)
        return {_decode(r) for r in (result or set())}

    def multi(self) -> RedisTransaction:
        if self._is_upstash:
            return RedisTransaction(self._client.multi(), is_upstash=True)
        return RedisTransaction(self._client.pipeline(transaction=True), is_upstash=False)


# ============================================================================
# Singleton management
# ============================================================================

_client: RedisAdapter | None = None


def get_client() -> RedisAdapter:
    """Return a lazily-initialized RedisAdapter singleton.

    Environment detection:
      - UPSTASH_REDIS_REST_URL set → Upstash SDK
      - Otherwise → fakeredis (in-memory, no external dependency)
    """
    global _client
    if _client is not None:
        return _client

    if os.environ.get("UPSTASH_REDIS_REST_URL"):
        from upstash_redis.asyncio import Redis

        _client = RedisAdapter(Redis.from_env(), is_upstash=True)
    else:
        from fakeredis.aioredis import FakeRedis

        _client = RedisAdapter(FakeRedis(decode_responses=True), is_upstash=False)

    return _client


def reset_client() -> None:
    """Reset the client singleton: used in tests to inject mocks."""
    global _client
    _client = None


def set_client(adapter: RedisAdapter) -> None:
    """Inject a client: used in tests."""
    global _client
    _client = adapter
