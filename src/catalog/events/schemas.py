"""Domain event schemas for the character catalog.

Events are recorded by entities and dispatched after the change is
committed, so handlers always see persisted identities.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Literal, TypeAlias
from uuid import uuid4

if TYPE_CHECKING:
    from catalog.core.model import Character


@dataclass(frozen=True, slots=True)
class CharacterCreatedEvent:
    """A character was persisted for the first time."""

    character: Character
    entity: Literal["character"] = "character"
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


DomainEvent: TypeAlias = CharacterCreatedEvent
