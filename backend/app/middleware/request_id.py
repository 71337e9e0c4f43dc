"""
Userbase Backend — Request ID Middleware
==========================================

What:  Gives each request a correlation ID and echoes it in X-Request-ID.
How:   Reuses the caller's X-Request-ID header when it is a short token of
       letters, digits, '.', '_' or '-'; anything else (too long, spaces,
       control characters) is replaced by a fresh short uuid4 so a client
       cannot inject arbitrary text into log lines. The ID is stored in a
       ContextVar so log calls and exception handlers can read it without
       access to the request object.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

_CLIENT_ID_PATTERN = re.compile(r"[A-Za-z0-9._-]{1,64}")

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    # 8 hex chars are enough to correlate log lines of one service
    return uuid.uuid4().hex[:8]


def resolve_request_id(header_value: str | None) -> str:
    if header_value and _CLIENT_ID_PATTERN.fullmatch(header_value):
        return header_value
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns and propagates the per-request correlation ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
