"""FastAPI dependencies.

Long-lived components live on ``app.state`` (set up in the lifespan);
sessions and repositories are created per request.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from catalog.cache.facade import AppCache
from catalog.cache.keys import CharacterCacheKeys
from catalog.characters.commands import CharacterCreateCommandHandler
from catalog.characters.queries import CharacterGetAllQueryHandler
from catalog.events.bus import EventBus
from catalog.persistence.db import session_context
from catalog.persistence.repositories import CharacterRepository, SqlCharacterRepository


def get_app_cache(request: Request) -> AppCache:
    return request.app.state.cache


def get_cache_keys(request: Request) -> CharacterCacheKeys:
    return request.app.state.cache_keys


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.bus


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    async with session_context(request.app.state.session_factory) as session:
        yield session


def get_repository(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CharacterRepository:
    return SqlCharacterRepository(session)


def get_query_handler(
    repository: Annotated[CharacterRepository, Depends(get_repository)],
    cache: Annotated[AppCache, Depends(get_app_cache)],
    keys: Annotated[CharacterCacheKeys, Depends(get_cache_keys)],
) -> CharacterGetAllQueryHandler:
    return CharacterGetAllQueryHandler(repository, cache, keys)


def get_create_handler(
    repository: Annotated[CharacterRepository, Depends(get_repository)],
    bus: Annotated[EventBus, Depends(get_event_bus)],
) -> CharacterCreateCommandHandler:
    return CharacterCreateCommandHandler(repository, bus)
