"""Correlation context middleware.

Reads or generates request and correlation IDs, binds them to the
logging context variables and echoes them in response headers.
"""

from __future__ import annotations

import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from catalog.observability.logging import LogContext


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Propagate x-request-id and x-correlation-id."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        correlation_id = request.headers.get("x-correlation-id") or request_id

        with LogContext(request_id=request_id, correlation_id=correlation_id):
            request.state.request_id = request_id
            response = await call_next(request)

        response.headers["x-request-id"] = request_id
        response.headers["x-correlation-id"] = correlation_id
        return response
