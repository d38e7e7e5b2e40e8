"""Request context middleware — request ids and request/response logging."""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from shelfbrowse.observability.logging import get_logger

logger = get_logger("shelfbrowse.access")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds a short request id to the log context for the life of a request."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:8]
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        query = f"?{request.url.query}" if request.url.query else ""
        logger.info("[REQUEST]", method=request.method, path=f"{request.url.path}{query}")

        start = time.monotonic()
        response = await call_next(request)

        logger.info(
            "[RESPONSE]",
            status=response.status_code,
            elapsed_ms=int((time.monotonic() - start) * 1000),
        )
        response.headers["X-Request-ID"] = request_id
        return response
