"""Write-aside cache maintenance for newly created characters.

On creation the new character is appended to the cached global
collection and, when it has a non-blank location, to that location's
collection. Each partition is patched on its own: read, skip if absent
or already containing the id, append, write back.

Concurrent creations for the same partition can both read the same
collection; the later write wins and the earlier append is lost until
the entry expires and is reloaded.
"""

from __future__ import annotations

import logging

from catalog.cache.facade import AppCache
from catalog.cache.keys import CharacterCacheKeys
from catalog.core.model import CharacterResponse
from catalog.events.schemas import CharacterCreatedEvent

logger = logging.getLogger(__name__)


class CharacterCreatedEventHandler:
    """Patch cached character collections with a created character."""

    def __init__(self, cache: AppCache, keys: CharacterCacheKeys | None = None):
        self.cache = cache
        self.keys = keys or CharacterCacheKeys()

    async def handle(self, event: CharacterCreatedEvent) -> None:
        character = CharacterResponse.from_character(event.character)

        await self._append(self.keys.all(), character)

        location_key = self.keys.resolve(character.location)
        if location_key != self.keys.all():
            await self._append(location_key, character)

    async def _append(self, cache_key: str, character: CharacterResponse) -> bool:
        """Append to one cached collection; returns True if it was written."""
        characters = await self.cache.get(cache_key, list[CharacterResponse])
        if characters is None:
            logger.debug(f"{cache_key} not cached, skipping patch for {character.id}")
            return False
        if any(c.id == character.id for c in characters):
            logger.debug(f"{cache_key} already contains {character.id}")
            return False

        characters.append(character)
        await self.cache.set(cache_key, characters)
        logger.debug(f"Appended character {character.id} to {cache_key}")
        return True
