"""Health check endpoint: database and cache backend reachability."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from catalog.persistence.db import health_check as db_health_check

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> JSONResponse:
    database_ok = await db_health_check(request.app.state.engine)
    cache_ok = await request.app.state.cache.health_check()

    healthy = database_ok and cache_ok
    body: dict[str, Any] = {
        "status": "healthy" if healthy else "unhealthy",
        "components": {"database": database_ok, "cache": cache_ok},
    }
    return JSONResponse(status_code=200 if healthy else 503, content=body)
