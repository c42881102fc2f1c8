"""Domain events and the bus that delivers them."""

from catalog.events.bus import EventBus, EventHandler, InMemoryEventBus
from catalog.events.schemas import CharacterCreatedEvent, DomainEvent

__all__ = [
    "CharacterCreatedEvent",
    "DomainEvent",
    "EventBus",
    "EventHandler",
    "InMemoryEventBus",
]
