"""Cache store adapter: the single point of default-TTL policy.

Wraps a ByteCache and resolves expiration before every write. Callers
that pass no expiration, or options with none set, get the configured
default; callers that set one keep it verbatim.
"""

from __future__ import annotations

from catalog.cache.backends import ByteCache
from catalog.cache.options import AppCacheOptions, CacheEntryOptions


class CacheStore:
    """Byte-level get/set/remove/refresh with default expiration applied."""

    def __init__(self, backend: ByteCache, options: AppCacheOptions | None = None):
        self.backend = backend
        self.options = options or AppCacheOptions()

    def resolve(self, options: CacheEntryOptions | None) -> CacheEntryOptions:
        return self.options.resolve(options)

    async def get(self, key: str) -> bytes | None:
        return await self.backend.get(key)

    async def set(self, key: str, value: bytes, options: CacheEntryOptions | None = None) -> None:
        await self.backend.set(key, value, self.resolve(options))

    async def remove(self, key: str) -> None:
        await self.backend.remove(key)

    async def refresh(self, key: str) -> None:
        await self.backend.refresh(key)

    def get_sync(self, key: str) -> bytes | None:
        return self.backend.get_sync(key)

    def set_sync(self, key: str, value: bytes, options: CacheEntryOptions | None = None) -> None:
        self.backend.set_sync(key, value, self.resolve(options))

    def remove_sync(self, key: str) -> None:
        self.backend.remove_sync(key)

    def refresh_sync(self, key: str) -> None:
        self.backend.refresh_sync(key)

    async def health_check(self) -> bool:
        return await self.backend.health_check()

    async def close(self) -> None:
        await self.backend.close()
