"""Persistence layer for the authoritative character dataset."""

from catalog.persistence.repositories import CharacterRepository, SqlCharacterRepository

__all__ = ["CharacterRepository", "SqlCharacterRepository"]
