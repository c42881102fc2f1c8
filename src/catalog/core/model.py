"""Character domain model and its public projections.

- Character: domain entity; identity is assigned by persistence
- CharacterResponse: flat projection used as cache payload and query result
- CharacterCreateRequest: validated input for creating a character
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from catalog.events.schemas import DomainEvent


class InvalidCharacterError(ValueError):
    """Character data breaks a domain rule."""


def _require(value: str | None, name: str) -> str:
    if value is None or not value.strip():
        raise InvalidCharacterError(f"{name} must not be blank")
    return value


class Character:
    """A catalog character.

    ``id`` is 0 until the repository assigns one and never changes after.
    """

    __slots__ = ("_id", "name", "species", "type", "gender", "location", "_domain_events")

    def __init__(
        self,
        id: int,
        name: str,
        species: str,
        type: str | None,
        gender: str,
        location: str | None,
    ):
        self._id = id
        self.name = _require(name, "name")
        self.species = _require(species, "species")
        self.type = type
        self.gender = _require(gender, "gender")
        self.location = location
        self._domain_events: list[DomainEvent] = []

    @property
    def id(self) -> int:
        return self._id

    def assign_id(self, id: int) -> None:
        """Set the identity issued by persistence."""
        if self._id and self._id != id:
            raise ValueError(f"Character already has id {self._id}")
        self._id = id

    @classmethod
    def create(
        cls,
        name: str,
        species: str,
        type: str | None,
        gender: str,
        location: str | None,
    ) -> Character:
        """Build an unsaved character and record its creation event."""
        from catalog.events.schemas import CharacterCreatedEvent

        character = cls(0, name, species, type, gender, location)
        character._domain_events.append(CharacterCreatedEvent(character=character))
        return character

    def pop_domain_events(self) -> list[DomainEvent]:
        """Hand over recorded events; each event is returned once."""
        events = list(self._domain_events)
        self._domain_events.clear()
        return events

    def __repr__(self) -> str:
        return f"Character(id={self._id!r}, name={self.name!r}, location={self.location!r})"


class CharacterResponse(BaseModel):
    """Public shape of a character."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    species: str
    type: str | None = None
    gender: str
    location: str | None = None

    @classmethod
    def from_character(cls, character: Character) -> CharacterResponse:
        return cls(
            id=character.id,
            name=character.name,
            species=character.species,
            type=character.type,
            gender=character.gender,
            location=character.location,
        )


class CharacterCreateRequest(BaseModel):
    """Input for creating a character."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=200)
    species: str = Field(min_length=1, max_length=100)
    type: str | None = Field(default=None, max_length=100)
    gender: str = Field(min_length=1, max_length=10)
    location: str | None = Field(default=None, max_length=100)
