"""
ReportDesk Backend — Health Check Route
=========================================

What:  Liveness/readiness probe for Docker and load balancers.
How:   Runs `SELECT 1` on the engine. A reachable database answers 200
       `healthy`; otherwise 503 `unhealthy` so the instance is taken out of
       rotation.
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from reportdesk import __version__, database
from reportdesk.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


async def check_database() -> bool:
    try:
        async with database.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        return False
    return True


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check():
    db_ok = await check_database()
    body = HealthResponse(
        status="healthy" if db_ok else "unhealthy",
        version=__version__,
        database="connected" if db_ok else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if not db_ok:
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
