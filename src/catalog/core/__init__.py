"""Domain model for the character catalog."""

from catalog.core.model import (
    Character,
    CharacterCreateRequest,
    CharacterResponse,
    InvalidCharacterError,
)

__all__ = ["Character", "CharacterCreateRequest", "CharacterResponse", "InvalidCharacterError"]
