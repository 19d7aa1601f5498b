"""
RequestContext Middleware - request tracing for every request.

Adds request.state.request_id, a UUID for tracing this request (or the
caller's X-Request-ID), and echoes it back as X-Request-ID.

The request id is also bound to structlog's context variables so every log
line emitted while handling the request, including notification dispatch,
carries it.
"""

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.infrastructure.observability.logging import (
    bind_request_context,
    clear_request_context,
    get_logger,
)

logger = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id

        bind_request_context(request_id=request_id)

        start_time = time.time()
        try:
            response = await call_next(request)
        finally:
            clear_request_context()

        logger.info(
            "HTTP request completed",
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.time() - start_time) * 1000, 2),
        )

        response.headers["X-Request-ID"] = request_id
        return response
