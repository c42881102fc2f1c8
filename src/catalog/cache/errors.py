"""Cache layer exceptions."""

from __future__ import annotations


class CacheError(Exception):
    """Base class for cache failures raised by this package."""


class CacheEncodeError(CacheError):
    """Value could not be serialized into an envelope."""


class CacheDecodeError(CacheError):
    """Envelope payload could not be decompressed or deserialized.

    The underlying exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, flag: int | None = None):
        self.flag = flag
        super().__init__(message)
