"""Shared fixtures: in-memory cache, fake clock and a fake repository."""

from __future__ import annotations

from collections.abc import Iterable

import pytest

from catalog.cache import AppCache, AppCacheOptions, CacheStore, EnvelopeCodec, InMemoryByteCache
from catalog.cache.keys import CharacterCacheKeys
from catalog.core.model import Character
from catalog.persistence.repositories import CharacterRepository


class FakeClock:
    """Manually advanced POSIX clock."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCharacterRepository(CharacterRepository):
    """In-memory repository that counts reads."""

    def __init__(self, characters: Iterable[Character] = ()) -> None:
        self.characters = list(characters)
        self.staged: list[Character] = []
        self.get_all_calls = 0
        self.get_by_location_calls = 0
        self.commits = 0

    async def get_all(self) -> list[Character]:
        self.get_all_calls += 1
        return list(self.characters)

    async def get_by_location(self, location: str) -> list[Character]:
        self.get_by_location_calls += 1
        return [
            c for c in self.characters if c.location and c.location.lower() == location.lower()
        ]

    async def add(self, character: Character) -> Character:
        character.assign_id(len(self.characters) + len(self.staged) + 1)
        self.staged.append(character)
        return character

    async def add_range(self, characters: Iterable[Character]) -> None:
        for character in characters:
            await self.add(character)

    async def save_changes(self) -> None:
        self.characters.extend(self.staged)
        self.staged.clear()
        self.commits += 1


def make_character(id: int, location: str | None = "Earth", name: str | None = None) -> Character:
    return Character(
        id=id,
        name=name or f"Character {id}",
        species="Human",
        type=None,
        gender="Male",
        location=location,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def byte_cache(clock: FakeClock) -> InMemoryByteCache:
    return InMemoryByteCache(clock=clock)


@pytest.fixture
def app_cache(byte_cache: InMemoryByteCache) -> AppCache:
    return AppCache(CacheStore(byte_cache, AppCacheOptions()), EnvelopeCodec())


@pytest.fixture
def keys() -> CharacterCacheKeys:
    return CharacterCacheKeys()


@pytest.fixture
def character_factory():
    """Build characters with a given id and location."""
    return make_character


@pytest.fixture
def repository_factory() -> type[FakeCharacterRepository]:
    """Build fake repositories seeded with characters."""
    return FakeCharacterRepository
