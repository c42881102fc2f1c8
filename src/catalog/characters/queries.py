"""Read-through query for paginated character listings.

Request flow:

    check cache --hit--> paginate cached collection
         |
        miss --> load whole collection from repository
                 --> cache it under the resolved key
                 --> paginate

The whole filtered collection is cached, never a single page, so later
requests for other pages or page sizes of the same filter are served
from cache until the entry expires. Concurrent misses for one key each
load and write an equivalent collection; they are not coalesced.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from catalog.cache.facade import AppCache
from catalog.cache.keys import CharacterCacheKeys
from catalog.core.model import CharacterResponse
from catalog.persistence.repositories import CharacterRepository

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True, slots=True)
class CharacterGetAllQuery:
    """List characters, optionally for one location.

    Page bounds are clamped by the caller.
    """

    location: str | None = None
    page_number: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


@dataclass(frozen=True, slots=True)
class CharacterPage:
    """One page of characters plus the size of the full collection."""

    served_from_cache: bool
    characters: list[CharacterResponse]
    total_count: int


def paginate(
    items: Sequence[CharacterResponse], page_number: int, page_size: int
) -> tuple[list[CharacterResponse], int]:
    """Slice ``[(page_number - 1) * page_size, page_number * page_size)``."""
    start = (page_number - 1) * page_size
    return list(items[start : start + page_size]), len(items)


class CharacterGetAllQueryHandler:
    """Serve character listings from cache, falling back to the repository."""

    def __init__(
        self,
        repository: CharacterRepository,
        cache: AppCache,
        keys: CharacterCacheKeys | None = None,
    ):
        self.repository = repository
        self.cache = cache
        self.keys = keys or CharacterCacheKeys()

    async def handle(self, query: CharacterGetAllQuery) -> CharacterPage:
        cache_key = self.keys.resolve(query.location)

        cached = await self.cache.get(cache_key, list[CharacterResponse])
        if cached is not None:
            logger.debug(f"Cache hit for {cache_key} ({len(cached)} characters)")
            page, total = paginate(cached, query.page_number, query.page_size)
            return CharacterPage(served_from_cache=True, characters=page, total_count=total)

        logger.debug(f"Cache miss for {cache_key}, loading from repository")
        characters = await self._load(query.location)
        await self.cache.set(cache_key, characters)

        page, total = paginate(characters, query.page_number, query.page_size)
        return CharacterPage(served_from_cache=False, characters=page, total_count=total)

    async def _load(self, location: str | None) -> list[CharacterResponse]:
        if location is not None and location.strip():
            characters = await self.repository.get_by_location(location)
        else:
            characters = await self.repository.get_all()
        return [CharacterResponse.from_character(c) for c in characters]
