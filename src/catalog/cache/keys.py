"""Cache key schema for the character catalog.

Key format:
- global:      {base}
- partitioned: {base}_{location.lower()}

The partition value is lower-cased here so that every reader and writer
lands on the same key. Anything outside this package that builds keys by
hand has to apply the same folding.
"""

from __future__ import annotations

DEFAULT_KEY_BASE = "characters"


class CharacterCacheKeys:
    """Cache key generator for cached character collections."""

    SEPARATOR = "_"

    def __init__(self, base: str = DEFAULT_KEY_BASE):
        if not base or not base.strip():
            raise ValueError("Cache key base must not be blank")
        self.base = base

    def all(self) -> str:
        """Key for the unfiltered collection."""
        return self.base

    def for_location(self, location: str) -> str:
        """Key for the collection of one location."""
        return f"{self.base}{self.SEPARATOR}{location.lower()}"

    def resolve(self, location: str | None) -> str:
        """Pick the partition key for a non-blank location, else the global key."""
        if location is None or not location.strip():
            return self.all()
        return self.for_location(location)
