"""Expiration options for cache entries and process-wide cache defaults."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from catalog.cache.codec import DEFAULT_COMPRESSION_LEVEL, DEFAULT_COMPRESSION_THRESHOLD

if TYPE_CHECKING:
    from catalog.config import Settings

DEFAULT_TTL = timedelta(minutes=5)


@dataclass(frozen=True, slots=True)
class CacheEntryOptions:
    """Expiration for a single cache entry.

    An entry may carry an absolute instant, a duration relative to the
    time of the write, a sliding window, or nothing at all. When both
    absolute forms are given the relative one wins.
    """

    absolute_expiration: datetime | None = None
    absolute_expiration_relative_to_now: timedelta | None = None
    sliding_expiration: timedelta | None = None

    def __post_init__(self) -> None:
        relative = self.absolute_expiration_relative_to_now
        if relative is not None and relative <= timedelta(0):
            raise ValueError("absolute_expiration_relative_to_now must be positive")
        if self.sliding_expiration is not None and self.sliding_expiration <= timedelta(0):
            raise ValueError("sliding_expiration must be positive")

    @property
    def has_expiration(self) -> bool:
        """True when the caller set any kind of expiration."""
        return (
            self.absolute_expiration is not None
            or self.absolute_expiration_relative_to_now is not None
            or self.sliding_expiration is not None
        )

    def absolute_deadline(self, now: float) -> float | None:
        """Absolute expiry as a POSIX timestamp, or None if unbounded.

        Raises:
            ValueError: if the absolute instant is not in the future
        """
        if self.absolute_expiration_relative_to_now is not None:
            return now + self.absolute_expiration_relative_to_now.total_seconds()
        if self.absolute_expiration is not None:
            deadline = self.absolute_expiration.timestamp()
            if deadline <= now:
                raise ValueError("The absolute expiration value must be in the future")
            return deadline
        return None

    @property
    def sliding_seconds(self) -> float | None:
        if self.sliding_expiration is None:
            return None
        return self.sliding_expiration.total_seconds()


@dataclass(frozen=True, slots=True)
class AppCacheOptions:
    """Process-wide cache configuration.

    ``default_absolute_expiration`` takes precedence over ``default_ttl``
    when both are set.
    """

    compression_threshold: int = DEFAULT_COMPRESSION_THRESHOLD
    compression_level: int = DEFAULT_COMPRESSION_LEVEL
    default_ttl: timedelta | None = field(default=DEFAULT_TTL)
    default_absolute_expiration: datetime | None = None

    def __post_init__(self) -> None:
        if self.compression_threshold < 1:
            raise ValueError("compression_threshold must be positive")
        if self.default_ttl is not None and self.default_ttl <= timedelta(0):
            raise ValueError("default_ttl must be positive")

    @classmethod
    def from_settings(cls, settings: Settings) -> AppCacheOptions:
        ttl = settings.cache_default_ttl_seconds
        return cls(
            compression_threshold=settings.cache_compression_threshold,
            compression_level=settings.cache_compression_level,
            default_ttl=timedelta(seconds=ttl) if ttl is not None else None,
            default_absolute_expiration=settings.cache_default_absolute_expiration,
        )

    def resolve(self, options: CacheEntryOptions | None) -> CacheEntryOptions:
        """Apply default expiration unless the caller chose one.

        This is the only place the default TTL policy lives.
        """
        if options is not None and options.has_expiration:
            return options
        if self.default_absolute_expiration is not None:
            return CacheEntryOptions(absolute_expiration=self.default_absolute_expiration)
        if self.default_ttl is not None:
            return CacheEntryOptions(absolute_expiration_relative_to_now=self.default_ttl)
        return CacheEntryOptions()
