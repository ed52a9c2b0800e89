"""
TaskBoard Backend — Liveness & Health Routes
==============================================

What:  GET /ping (process is up) and GET /health (database reachable).
Who:   Load balancers, container health checks, humans with curl.
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app import __version__
from app.database import CONNECT_ERRORS, check_connection
from app.schemas.common import HealthResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/ping", response_model=MessageResponse, summary="Liveness check")
async def ping() -> MessageResponse:
    return MessageResponse(message="Server is running!")


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check():
    """
    Probe the database with SELECT 1.

    Returns 200 when connected, 503 with status "unhealthy" otherwise.
    """
    db_status = "connected"
    overall = "healthy"

    try:
        await check_connection()
    except CONNECT_ERRORS as e:
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
