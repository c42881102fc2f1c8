"""Tests for character creation commands."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from catalog.characters.commands import (
    CharacterCreateCommand,
    CharacterCreateCommandHandler,
    CharactersCreateCommand,
    CharactersCreateCommandHandler,
)
from catalog.core.model import CharacterCreateRequest
from catalog.events.bus import EventBus
from catalog.events.schemas import CharacterCreatedEvent


def _request(name: str = "Rick Sanchez", location: str | None = "Earth") -> CharacterCreateRequest:
    return CharacterCreateRequest(name=name, species="Human", gender="Male", location=location)


class TestCharacterCreateCommandHandler:
    """Test single character creation."""

    @pytest.fixture
    def bus(self) -> AsyncMock:
        return AsyncMock(spec=EventBus)

    async def test_creates_and_publishes(self, repository_factory, bus: AsyncMock) -> None:
        """The character is committed and its creation event published."""
        repository = repository_factory()
        handler = CharacterCreateCommandHandler(repository, bus)

        response = await handler.handle(CharacterCreateCommand(_request()))

        assert response.id == 1
        assert response.name == "Rick Sanchez"
        assert repository.commits == 1
        assert [c.id for c in repository.characters] == [1]

        bus.publish.assert_awaited_once()
        event = bus.publish.await_args.args[0]
        assert isinstance(event, CharacterCreatedEvent)
        assert event.character.id == 1

    async def test_publishes_after_commit(self, repository_factory) -> None:
        """Handlers observe the committed character and its assigned id."""
        repository = repository_factory()
        seen: list[tuple[int, int]] = []

        bus = AsyncMock(spec=EventBus)

        async def publish(event: CharacterCreatedEvent) -> None:
            seen.append((event.character.id, repository.commits))

        bus.publish.side_effect = publish
        await CharacterCreateCommandHandler(repository, bus).handle(
            CharacterCreateCommand(_request())
        )

        assert seen == [(1, 1)]

    async def test_event_published_once(self, repository_factory, bus: AsyncMock) -> None:
        """Two creations publish two distinct events."""
        handler = CharacterCreateCommandHandler(repository_factory(), bus)
        await handler.handle(CharacterCreateCommand(_request("Rick")))
        await handler.handle(CharacterCreateCommand(_request("Morty")))

        ids = [call.args[0].character.id for call in bus.publish.await_args_list]
        assert ids == [1, 2]

    async def test_save_failure_publishes_nothing(
        self, repository_factory, bus: AsyncMock
    ) -> None:
        """No event goes out when the commit fails."""
        repository = repository_factory()
        repository.save_changes = AsyncMock(side_effect=RuntimeError("db down"))
        handler = CharacterCreateCommandHandler(repository, bus)

        with pytest.raises(RuntimeError):
            await handler.handle(CharacterCreateCommand(_request()))
        bus.publish.assert_not_awaited()


class TestCharactersCreateCommandHandler:
    """Test bulk import."""

    async def test_imports_without_events(self, repository_factory) -> None:
        """Bulk inserts commit once and return the count."""
        repository = repository_factory()
        handler = CharactersCreateCommandHandler(repository)

        count = await handler.handle(
            CharactersCreateCommand((_request("Rick"), _request("Morty"), _request("Summer")))
        )

        assert count == 3
        assert repository.commits == 1
        assert [c.name for c in repository.characters] == ["Rick", "Morty", "Summer"]
        assert all(c.pop_domain_events() == [] for c in repository.characters)
