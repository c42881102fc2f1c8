"""Cache layer for the character catalog.

Cache-aside over an opaque byte store:
- EnvelopeCodec: flag-byte envelopes with optional gzip
- CacheStore: byte access with the default expiration policy
- AppCache: typed get/set, the only way in for the rest of the app
- ByteCache backends: in-memory or Redis

Components receive an AppCache through their constructors; there is no
module-level cache instance.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from catalog.cache.backends import ByteCache, InMemoryByteCache
from catalog.cache.codec import EnvelopeCodec, EnvelopeFlag
from catalog.cache.errors import CacheDecodeError, CacheEncodeError, CacheError
from catalog.cache.facade import AppCache
from catalog.cache.keys import CharacterCacheKeys
from catalog.cache.options import AppCacheOptions, CacheEntryOptions
from catalog.cache.store import CacheStore

if TYPE_CHECKING:
    from catalog.config import Settings


def create_byte_cache(settings: Settings) -> ByteCache:
    """Create the byte backend selected by ``cache_backend``."""
    backend = settings.cache_backend.lower()
    if backend == "memory":
        return InMemoryByteCache()
    if backend == "redis":
        from catalog.cache.redis import RedisByteCache

        return RedisByteCache.from_url(
            settings.redis_url, instance_name=settings.redis_instance_name
        )
    raise ValueError(f"Unknown cache backend: {settings.cache_backend}")


def create_app_cache(settings: Settings, backend: ByteCache | None = None) -> AppCache:
    """Assemble the typed cache from configuration."""
    options = AppCacheOptions.from_settings(settings)
    store = CacheStore(backend if backend is not None else create_byte_cache(settings), options)
    codec = EnvelopeCodec(
        compression_threshold=options.compression_threshold,
        compression_level=options.compression_level,
    )
    return AppCache(store, codec)


__all__ = [
    "AppCache",
    "AppCacheOptions",
    "ByteCache",
    "CacheDecodeError",
    "CacheEncodeError",
    "CacheEntryOptions",
    "CacheError",
    "CacheStore",
    "CharacterCacheKeys",
    "EnvelopeCodec",
    "EnvelopeFlag",
    "InMemoryByteCache",
    "create_app_cache",
    "create_byte_cache",
]
