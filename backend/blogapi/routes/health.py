"""
Blog API Backend — Health Check Route
======================================

What:  Health check endpoint for monitoring and load balancer probes.
Why:   Load balancers route away from instances that cannot reach the
       database, the only dependency this service has.
How:   Runs SELECT 1 on the engine and reports status, version and uptime.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503, stop routing traffic)

The request logging middleware skips this path, so frequent probes do not
flood the access log.
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from blogapi import __version__
from blogapi import database
from blogapi.schemas.common import HealthResponse
from blogapi.schemas.envelope import Envelope

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Track when the service started for uptime reporting
_start_time = time.time()


@router.get("/health", summary="Service health check")
async def health_check() -> JSONResponse:
    """
    Probe the database and return the aggregate status inside the envelope.

    Why SELECT 1: health checks run every few seconds, so the probe must be
    essentially free.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        async with database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    health = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    status_code = 200 if overall == "healthy" else 503
    return Envelope(code=status_code, message=overall.capitalize(), data=health).to_response()
