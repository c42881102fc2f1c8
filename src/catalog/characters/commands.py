"""Commands that write characters to the authoritative source."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from catalog.core.model import Character, CharacterCreateRequest, CharacterResponse
from catalog.events.bus import EventBus
from catalog.persistence.repositories import CharacterRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CharacterCreateCommand:
    request: CharacterCreateRequest


@dataclass(frozen=True, slots=True)
class CharactersCreateCommand:
    """Bulk insert used by imports; publishes no events."""

    requests: tuple[CharacterCreateRequest, ...]


class CharacterCreateCommandHandler:
    """Persist one character, then publish its domain events."""

    def __init__(self, repository: CharacterRepository, bus: EventBus):
        self.repository = repository
        self.bus = bus

    async def handle(self, command: CharacterCreateCommand) -> CharacterResponse:
        request = command.request
        character = Character.create(
            request.name,
            request.species,
            request.type,
            request.gender,
            request.location,
        )

        added = await self.repository.add(character)
        await self.repository.save_changes()

        # Events go out only after commit so handlers see the assigned id
        for event in added.pop_domain_events():
            await self.bus.publish(event)

        logger.info(f"Created character {added.id}")
        return CharacterResponse.from_character(added)


class CharactersCreateCommandHandler:
    """Persist many characters in one transaction."""

    def __init__(self, repository: CharacterRepository):
        self.repository = repository

    async def handle(self, command: CharactersCreateCommand) -> int:
        characters = [
            Character(0, r.name, r.species, r.type, r.gender, r.location)
            for r in command.requests
        ]
        await self.repository.add_range(characters)
        await self.repository.save_changes()
        logger.info(f"Imported {len(characters)} characters")
        return len(characters)
