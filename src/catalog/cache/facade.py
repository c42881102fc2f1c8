"""Typed cache facade.

AppCache is what the rest of the application talks to: typed values in,
typed values out. It owns envelope encoding and is the only component
that reaches the byte store.

Usage:
    cache = create_app_cache(settings)
    await cache.set("characters", [CharacterResponse(...)])
    characters = await cache.get("characters", list[CharacterResponse])
"""

from __future__ import annotations

from typing import Any, TypeVar

from catalog.cache.codec import EnvelopeCodec
from catalog.cache.options import CacheEntryOptions
from catalog.cache.store import CacheStore

T = TypeVar("T")


class AppCache:
    """Get and set arbitrary typed values under string keys."""

    def __init__(self, store: CacheStore, codec: EnvelopeCodec | None = None):
        self.store = store
        self.codec = codec or EnvelopeCodec(
            compression_threshold=store.options.compression_threshold,
            compression_level=store.options.compression_level,
        )

    async def get(self, key: str, as_type: type[T]) -> T | None:
        """Return the cached value, or None when the key is absent or empty.

        Raises:
            CacheDecodeError: stored envelope cannot be decoded
        """
        envelope = await self.store.get(key)
        if not envelope:
            return None
        return self.codec.decode(envelope, as_type)

    async def set(self, key: str, value: Any, options: CacheEntryOptions | None = None) -> None:
        """Encode and store a value; default expiration applies when options set none."""
        envelope = self.codec.encode(value)
        await self.store.set(key, envelope, options)

    async def remove(self, key: str) -> None:
        await self.store.remove(key)

    async def refresh(self, key: str) -> None:
        await self.store.refresh(key)

    def get_sync(self, key: str, as_type: type[T]) -> T | None:
        envelope = self.store.get_sync(key)
        if not envelope:
            return None
        return self.codec.decode(envelope, as_type)

    def set_sync(self, key: str, value: Any, options: CacheEntryOptions | None = None) -> None:
        self.store.set_sync(key, self.codec.encode(value), options)

    def remove_sync(self, key: str) -> None:
        self.store.remove_sync(key)

    def refresh_sync(self, key: str) -> None:
        self.store.refresh_sync(key)

    async def health_check(self) -> bool:
        return await self.store.health_check()

    async def close(self) -> None:
        await self.store.close()
