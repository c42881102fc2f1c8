"""Delivery of domain events to their handlers.

Commands publish events after their changes are committed. The bus hands
each event to every subscribed handler, one event at a time and in
publish order, on a background task owned by the application lifespan.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from catalog.events.schemas import DomainEvent

logger = logging.getLogger(__name__)


EventHandler = Callable[[DomainEvent], Awaitable[None]]

# How long the dispatcher waits for an event before rechecking for shutdown
IDLE_POLL_SECONDS = 1.0


class EventBus(ABC):
    """Publish/subscribe seam between commands and event handlers."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        pass

    @abstractmethod
    async def subscribe(self, handler: EventHandler) -> None:
        pass

    @abstractmethod
    async def start(self) -> None:
        pass

    @abstractmethod
    async def stop(self) -> None:
        pass


class InMemoryEventBus(EventBus):
    """Single-process bus on an asyncio.Queue.

    A failing handler is logged and skipped; the remaining handlers and
    events are still dispatched. ``publish`` waits while the queue holds
    ``max_size`` undelivered events.
    """

    def __init__(self, max_size: int = 10000):
        self._queue: asyncio.Queue[DomainEvent] = asyncio.Queue(maxsize=max_size)
        self._handlers: list[EventHandler] = []
        self._dispatcher: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._dispatcher is not None

    @property
    def pending_count(self) -> int:
        """Events published but not yet picked up."""
        return self._queue.qsize()

    async def publish(self, event: DomainEvent) -> None:
        await self._queue.put(event)

    async def subscribe(self, handler: EventHandler) -> None:
        self._handlers.append(handler)

    async def start(self) -> None:
        if self._dispatcher is None:
            self._dispatcher = asyncio.create_task(self._dispatch_forever())

    async def stop(self) -> None:
        """Cancel the dispatcher; undelivered events stay queued."""
        dispatcher, self._dispatcher = self._dispatcher, None
        if dispatcher is None:
            return
        dispatcher.cancel()
        try:
            await dispatcher
        except asyncio.CancelledError:
            pass

    async def drain(self) -> None:
        """Block until every published event has been handled."""
        await self._queue.join()

    async def _dispatch_forever(self) -> None:
        while True:
            try:
                event = await asyncio.wait_for(self._queue.get(), timeout=IDLE_POLL_SECONDS)
            except TimeoutError:
                continue
            try:
                await self._deliver(event)
            finally:
                self._queue.task_done()

    async def _deliver(self, event: DomainEvent) -> None:
        for handler in self._handlers:
            try:
                await handler(event)
            except Exception:
                logger.exception(
                    f"Error in event handler for {event.entity} event {event.event_id}"
                )
