"""Character use cases: listing, creation and cache maintenance."""

from catalog.characters.commands import (
    CharacterCreateCommand,
    CharacterCreateCommandHandler,
    CharactersCreateCommand,
    CharactersCreateCommandHandler,
)
from catalog.characters.events import CharacterCreatedEventHandler
from catalog.characters.queries import (
    CharacterGetAllQuery,
    CharacterGetAllQueryHandler,
    CharacterPage,
    paginate,
)

__all__ = [
    "CharacterCreateCommand",
    "CharacterCreateCommandHandler",
    "CharacterCreatedEventHandler",
    "CharacterGetAllQuery",
    "CharacterGetAllQueryHandler",
    "CharacterPage",
    "CharactersCreateCommand",
    "CharactersCreateCommandHandler",
    "paginate",
]
