"""
MindPad Backend — Health Check Route
=====================================

What:  Liveness and dependency status for probes and monitoring.
How:   `SELECT 1` against the database; the AI gateway is reported from its
       configuration only (probing it would spend credits).

Status levels:
    healthy:    database reachable, gateway credential set
    degraded:   database reachable, gateway credential missing
    unhealthy:  database unreachable
"""

import logging
import time

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from mindpad import __version__
from mindpad.database import engine
from mindpad.schemas.note import HealthResponse
from mindpad.services.gateway_service import gateway_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    description="Health of the service, its database and the AI gateway configuration.",
)
async def health_check() -> HealthResponse:
    db_status = "connected"
    gateway_status = "configured"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    if not await gateway_service.health_check():
        gateway_status = "unconfigured"
        if overall == "healthy":
            overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        gateway=gateway_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
