"""
Userbase Backend — Health Check Route
=======================================

What:  Health check endpoint for container and load balancer probes.
How:   Runs SELECT 1 against the application's engine.
When:  Periodically (e.g., every 30 seconds by Docker).

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503, stop routing traffic)
"""

import logging
import time

from fastapi import APIRouter, Request, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app import __version__
from app.schemas.user import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request, response: Response) -> HealthResponse:
    """
    Check that the service can reach its database.

    Not mounted under the API prefix and not request-logged, so probes
    neither depend on API_PREFIX nor flood the access log.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        async with request.app.state.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        response.status_code = 503
        logger.warning("Health check: database unreachable: %s", type(e).__name__)

    return HealthResponse(
        status=overall,
        version=__version__,
        profile=request.app.state.settings.app_profile,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
