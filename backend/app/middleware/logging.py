"""
Userbase Backend — Request Logging Middleware
===============================================

What:  One access log line per HTTP request.
How:   Times the downstream call and logs to the `userbase.access` logger.
       Besides the concrete path, each line carries the matched route
       template (e.g. /api/users/{user_id}) so traffic per endpoint can be
       grouped without parsing ids out of paths.

Log level by status:
    5xx → ERROR, 4xx → WARNING, everything else → INFO

Privacy: request/response bodies are never logged (names and emails are
personal data).
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.middleware.request_id import request_id_var

logger = logging.getLogger("userbase.access")

# Probed every few seconds by Docker / load balancers
UNLOGGED_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def route_template(request: Request) -> str:
    """Path template of the matched route; the raw path when nothing matched."""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs status and duration of each request."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in UNLOGGED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)

        rid = request_id_var.get("")
        logger.log(
            level_for_status(response.status_code),
            "%s %s -> %d in %.1fms [%s] from %s",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            rid,
            request.client.host if request.client else "unknown",
            # fields for structured handlers; the rest is in the message
            extra={
                "route": route_template(request),
                "status": response.status_code,
                "duration_ms": duration_ms,
                "request_id": rid,
            },
        )
        return response
