"""Redis byte cache backend.

Each entry is a Redis hash, written in one MULTI/EXEC pipeline together
with its TTL:

    {instance_name}{key} -> {"absexp": ms | -1, "sldexp": ms | -1, "data": bytes}

The key TTL is the sliding window capped by the absolute deadline. Reads
of sliding entries re-arm the TTL from the stored fields.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, cast

import redis as redis_sync
import redis.asyncio as redis

from catalog.cache.backends import ByteCache
from catalog.cache.options import CacheEntryOptions

if TYPE_CHECKING:
    from redis import Redis as SyncRedis
    from redis.asyncio import Redis

ABSOLUTE_FIELD = "absexp"
SLIDING_FIELD = "sldexp"
DATA_FIELD = "data"
NOT_PRESENT = -1


def _to_ms(seconds: float | None) -> int:
    return NOT_PRESENT if seconds is None else int(seconds * 1000)


def _from_ms(raw: Any) -> float | None:
    if raw is None:
        return None
    value = int(raw)
    return None if value == NOT_PRESENT else value / 1000


def _ttl_ms(now: float, absolute: float | None, sliding: float | None) -> int | None:
    """Key TTL in milliseconds, or None for a persistent key."""
    if sliding is not None:
        ttl = sliding if absolute is None else min(sliding, absolute - now)
    elif absolute is not None:
        ttl = absolute - now
    else:
        return None
    return max(1, int(ttl * 1000))


class RedisByteCache(ByteCache):
    """Byte cache on a shared Redis instance.

    The async client serves the async API. The sync API needs a
    synchronous client and raises RuntimeError without one.
    """

    def __init__(
        self,
        client: Redis,
        sync_client: SyncRedis | None = None,
        instance_name: str = "",
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.sync_client = sync_client
        self.instance_name = instance_name
        self._clock = clock

    @classmethod
    def from_url(cls, url: str, instance_name: str = "") -> RedisByteCache:
        """Create async and sync clients sharing one URL."""
        client = redis.from_url(url, decode_responses=False)  # type: ignore[no-untyped-call]
        sync_client = redis_sync.from_url(url, decode_responses=False)
        return cls(client, sync_client, instance_name=instance_name)

    def _key(self, key: str) -> str:
        return f"{self.instance_name}{key}"

    def _require_sync(self) -> SyncRedis:
        if self.sync_client is None:
            raise RuntimeError("RedisByteCache was created without a synchronous client")
        return self.sync_client

    def _plan_write(
        self, value: bytes, options: CacheEntryOptions
    ) -> tuple[dict[str, Any], int | None]:
        now = self._clock()
        absolute = options.absolute_deadline(now)
        sliding = options.sliding_seconds
        mapping = {
            ABSOLUTE_FIELD: _to_ms(absolute),
            SLIDING_FIELD: _to_ms(sliding),
            DATA_FIELD: value,
        }
        return mapping, _ttl_ms(now, absolute, sliding)

    def _rearm_ttl(self, raw_absolute: Any, raw_sliding: Any) -> int | None:
        """TTL for a sliding entry being touched; None if it does not slide."""
        sliding = _from_ms(raw_sliding)
        if sliding is None:
            return None
        return _ttl_ms(self._clock(), _from_ms(raw_absolute), sliding)

    # -------------------------------------------------------------------------
    # Async API
    # -------------------------------------------------------------------------

    async def get(self, key: str) -> bytes | None:
        full_key = self._key(key)
        raw_absolute, raw_sliding, data = await cast(
            Awaitable[list[Any]],
            self.client.hmget(full_key, [ABSOLUTE_FIELD, SLIDING_FIELD, DATA_FIELD]),
        )
        if data is None:
            return None
        ttl_ms = self._rearm_ttl(raw_absolute, raw_sliding)
        if ttl_ms is not None:
            await self.client.pexpire(full_key, ttl_ms)
        return cast(bytes, data)

    async def set(self, key: str, value: bytes, options: CacheEntryOptions) -> None:
        full_key = self._key(key)
        mapping, ttl_ms = self._plan_write(value, options)
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.delete(full_key)
            pipe.hset(full_key, mapping=mapping)
            if ttl_ms is not None:
                pipe.pexpire(full_key, ttl_ms)
            await pipe.execute()

    async def remove(self, key: str) -> None:
        await self.client.delete(self._key(key))

    async def refresh(self, key: str) -> None:
        full_key = self._key(key)
        raw_absolute, raw_sliding = await cast(
            Awaitable[list[Any]],
            self.client.hmget(full_key, [ABSOLUTE_FIELD, SLIDING_FIELD]),
        )
        ttl_ms = self._rearm_ttl(raw_absolute, raw_sliding)
        if ttl_ms is not None:
            await self.client.pexpire(full_key, ttl_ms)

    async def health_check(self) -> bool:
        """Check Redis connectivity."""
        try:
            await cast(Awaitable[bool], self.client.ping())
            return True
        except Exception:
            return False

    async def close(self) -> None:
        await self.client.aclose()
        if self.sync_client is not None:
            self.sync_client.close()

    # -------------------------------------------------------------------------
    # Sync API
    # -------------------------------------------------------------------------

    def get_sync(self, key: str) -> bytes | None:
        client = self._require_sync()
        full_key = self._key(key)
        raw_absolute, raw_sliding, data = cast(
            list[Any], client.hmget(full_key, [ABSOLUTE_FIELD, SLIDING_FIELD, DATA_FIELD])
        )
        if data is None:
            return None
        ttl_ms = self._rearm_ttl(raw_absolute, raw_sliding)
        if ttl_ms is not None:
            client.pexpire(full_key, ttl_ms)
        return cast(bytes, data)

    def set_sync(self, key: str, value: bytes, options: CacheEntryOptions) -> None:
        client = self._require_sync()
        full_key = self._key(key)
        mapping, ttl_ms = self._plan_write(value, options)
        with client.pipeline(transaction=True) as pipe:
            pipe.delete(full_key)
            pipe.hset(full_key, mapping=mapping)
            if ttl_ms is not None:
                pipe.pexpire(full_key, ttl_ms)
            pipe.execute()

    def remove_sync(self, key: str) -> None:
        self._require_sync().delete(self._key(key))

    def refresh_sync(self, key: str) -> None:
        client = self._require_sync()
        full_key = self._key(key)
        raw_absolute, raw_sliding = cast(
            list[Any], client.hmget(full_key, [ABSOLUTE_FIELD, SLIDING_FIELD])
        )
        ttl_ms = self._rearm_ttl(raw_absolute, raw_sliding)
        if ttl_ms is not None:
            client.pexpire(full_key, ttl_ms)
