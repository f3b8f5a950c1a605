"""
PlaceShare Backend: Health Check Route
======================================

What:  GET /health for Docker health checks and load balancer probes.
How:   The database is the only critical dependency; it is probed with
       SELECT 1. Geocoding is not probed, since a geocoder outage only
       affects place creation and already fails closed.

    healthy    database reachable   → 200
    unhealthy  database unreachable → 503
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from placeshare import __version__
from placeshare.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    db_status = "connected"
    overall = "healthy"

    try:
        await request.app.state.database.ping()
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall != "healthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
