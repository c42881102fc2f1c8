"""Repository for the authoritative character dataset.

CharacterRepository is the contract the cache handlers depend on;
SqlCharacterRepository implements it on an async SQLAlchemy session.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.core.model import Character
from catalog.persistence.tables import CharacterTable


class CharacterRepository(ABC):
    """Source of truth for characters."""

    @abstractmethod
    async def get_all(self) -> list[Character]:
        pass

    @abstractmethod
    async def get_by_location(self, location: str) -> list[Character]:
        """Characters whose location matches case-insensitively."""
        pass

    @abstractmethod
    async def add(self, character: Character) -> Character:
        """Stage a character and assign its id."""
        pass

    @abstractmethod
    async def add_range(self, characters: Iterable[Character]) -> None:
        pass

    @abstractmethod
    async def save_changes(self) -> None:
        """Commit staged changes."""
        pass


def _to_domain(row: CharacterTable) -> Character:
    return Character(
        id=row.id,
        name=row.name,
        species=row.species,
        type=row.type,
        gender=row.gender,
        location=row.location,
    )


def _to_row(character: Character) -> CharacterTable:
    return CharacterTable(
        name=character.name,
        species=character.species,
        type=character.type,
        gender=character.gender,
        location=character.location,
    )


class SqlCharacterRepository(CharacterRepository):
    """CharacterRepository on SQLAlchemy, ordered by id."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_all(self) -> list[Character]:
        stmt = select(CharacterTable).order_by(CharacterTable.id)
        result = await self.session.execute(stmt)
        return [_to_domain(row) for row in result.scalars()]

    async def get_by_location(self, location: str) -> list[Character]:
        stmt = (
            select(CharacterTable)
            .where(func.lower(CharacterTable.location) == location.lower())
            .order_by(CharacterTable.id)
        )
        result = await self.session.execute(stmt)
        return [_to_domain(row) for row in result.scalars()]

    async def add(self, character: Character) -> Character:
        row = _to_row(character)
        self.session.add(row)
        await self.session.flush()
        character.assign_id(row.id)
        return character

    async def add_range(self, characters: Iterable[Character]) -> None:
        self.session.add_all([_to_row(c) for c in characters])
        await self.session.flush()

    async def save_changes(self) -> None:
        await self.session.commit()
