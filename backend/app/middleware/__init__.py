# Middleware package init
"""
Userbase Backend — Middleware Package
=======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation ID available to every later log line
    2. Logging: one access line per request, tagged with that ID
    3. GZip / CORS: FastAPI built-ins

    Responses travel the chain in reverse, so the X-Request-ID header is
    present on every response, including error responses.
"""
