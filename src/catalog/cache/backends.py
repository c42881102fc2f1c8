"""Byte-oriented cache backends.

A backend is an opaque key -> bytes store with expiration. It knows
nothing about envelopes or typed values; CacheStore is its only caller.

- InMemoryByteCache: single-process store for development and tests
- RedisByteCache (catalog.cache.redis): shared store for multi-instance runs
"""

from __future__ import annotations

import asyncio
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

from catalog.cache.options import CacheEntryOptions


class ByteCache(ABC):
    """Abstract byte cache with sync and async forms of every operation.

    Single-key ``set`` must be atomic. There is no compare-and-swap yet;
    concurrent writers to one key resolve as last-write-wins.
    """

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Return stored bytes, refreshing a sliding entry; None if absent."""
        pass

    @abstractmethod
    async def set(self, key: str, value: bytes, options: CacheEntryOptions) -> None:
        """Store bytes under a key with fully resolved expiration."""
        pass

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Delete a key if present."""
        pass

    @abstractmethod
    async def refresh(self, key: str) -> None:
        """Extend a sliding entry without reading it."""
        pass

    @abstractmethod
    def get_sync(self, key: str) -> bytes | None:
        pass

    @abstractmethod
    def set_sync(self, key: str, value: bytes, options: CacheEntryOptions) -> None:
        pass

    @abstractmethod
    def remove_sync(self, key: str) -> None:
        pass

    @abstractmethod
    def refresh_sync(self, key: str) -> None:
        pass

    async def health_check(self) -> bool:
        """Check backend reachability."""
        return True

    async def close(self) -> None:
        """Release backend resources."""
        return None


@dataclass(slots=True)
class _Entry:
    value: bytes
    absolute_deadline: float | None
    sliding_seconds: float | None
    expires_at: float | None

    def arm(self, now: float) -> None:
        """Recompute expiry from the sliding window, capped by the absolute deadline."""
        if self.sliding_seconds is None:
            self.expires_at = self.absolute_deadline
            return
        sliding_deadline = now + self.sliding_seconds
        if self.absolute_deadline is None:
            self.expires_at = sliding_deadline
        else:
            self.expires_at = min(sliding_deadline, self.absolute_deadline)


class InMemoryByteCache(ByteCache):
    """Thread-safe in-process byte cache.

    Expired entries are evicted lazily when touched. The clock returns
    POSIX seconds and can be replaced in tests.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for e in self._entries.values() if not self._expired(e, now))

    @staticmethod
    def _expired(entry: _Entry, now: float) -> bool:
        return entry.expires_at is not None and entry.expires_at <= now

    def _live_entry(self, key: str, now: float) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(entry, now):
            del self._entries[key]
            return None
        return entry

    def get_sync(self, key: str) -> bytes | None:
        with self._lock:
            now = self._clock()
            entry = self._live_entry(key, now)
            if entry is None:
                return None
            entry.arm(now)
            return entry.value

    def set_sync(self, key: str, value: bytes, options: CacheEntryOptions) -> None:
        now = self._clock()
        entry = _Entry(
            value=bytes(value),
            absolute_deadline=options.absolute_deadline(now),
            sliding_seconds=options.sliding_seconds,
            expires_at=None,
        )
        entry.arm(now)
        with self._lock:
            self._entries[key] = entry

    def remove_sync(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def refresh_sync(self, key: str) -> None:
        with self._lock:
            now = self._clock()
            entry = self._live_entry(key, now)
            if entry is not None:
                entry.arm(now)

    async def get(self, key: str) -> bytes | None:
        await asyncio.sleep(0)
        return self.get_sync(key)

    async def set(self, key: str, value: bytes, options: CacheEntryOptions) -> None:
        await asyncio.sleep(0)
        self.set_sync(key, value, options)

    async def remove(self, key: str) -> None:
        await asyncio.sleep(0)
        self.remove_sync(key)

    async def refresh(self, key: str) -> None:
        await asyncio.sleep(0)
        self.refresh_sync(key)
