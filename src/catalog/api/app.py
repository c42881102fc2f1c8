"""FastAPI application factory for the character catalog.

The lifespan builds every long-lived component explicitly and hangs it on
``app.state``:
- database engine and session factory
- byte cache backend wrapped in the typed AppCache
- in-memory event bus with the write-aside cache handler subscribed
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import FastAPI
from starlette.types import ExceptionHandler

from catalog.api.errors import generic_exception_handler, invalid_character_handler
from catalog.api.middleware import CorrelationMiddleware
from catalog.api.routers import characters, health
from catalog.cache import ByteCache, CharacterCacheKeys, create_app_cache
from catalog.characters.events import CharacterCreatedEventHandler
from catalog.config import Settings
from catalog.config import settings as default_settings
from catalog.core.model import InvalidCharacterError
from catalog.events.bus import InMemoryEventBus
from catalog.observability import configure_logging
from catalog.persistence.db import create_engine_from_settings, create_session_factory, init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    On startup: configure logging, create tables, open the cache backend,
    start the event bus. On shutdown: drain and stop the bus, close the
    cache backend, dispose the engine.
    """
    settings: Settings = app.state.settings
    configure_logging(json_format=settings.log_json, level=settings.log_level)
    logger.info(f"Starting {settings.app_name} ({settings.env})")

    engine = create_engine_from_settings(settings)
    await init_db(engine)

    cache = create_app_cache(settings, backend=app.state.byte_cache)
    keys = CharacterCacheKeys(settings.cache_key_base)

    bus = InMemoryEventBus()
    await bus.subscribe(CharacterCreatedEventHandler(cache, keys).handle)
    await bus.start()

    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.cache = cache
    app.state.cache_keys = keys
    app.state.bus = bus
    logger.info(f"Cache backend: {settings.cache_backend}")

    yield

    logger.info(f"Shutting down {settings.app_name}")
    await bus.drain()
    await bus.stop()
    await cache.close()
    await engine.dispose()


def create_app(settings: Settings | None = None, byte_cache: ByteCache | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: configuration; the module-level settings by default
        byte_cache: backend to use instead of the configured one
    """
    app = FastAPI(
        title="Character Catalog",
        description="Character catalog with a cache-aside distributed cache",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings or default_settings
    app.state.byte_cache = byte_cache

    app.add_middleware(CorrelationMiddleware)

    app.add_exception_handler(
        InvalidCharacterError, cast(ExceptionHandler, invalid_character_handler)
    )
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))

    app.include_router(health.router)
    app.include_router(characters.router)

    return app
