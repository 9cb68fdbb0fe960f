"""
Health check endpoints.
"""

import time

import aiosqlite
from fastapi import APIRouter

from stockledger import __version__
from stockledger.application.dto.responses import HealthResponse
from stockledger.config import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check.

    Returns service status and uptime.
    """
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=time.time() - _start_time,
    )


@router.get("/db", response_model=HealthResponse)
async def database_health() -> HealthResponse:
    """Check that the ledger database answers queries."""
    from stockledger.infrastructure.storage.sqlite import get_connection

    healthy = True
    try:
        async with get_connection() as conn:
            await conn.execute("SELECT 1 FROM inventory_records LIMIT 1")
    except aiosqlite.Error as e:
        logger.warning("database_health_failed", error=str(e))
        healthy = False

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=__version__,
        uptime_seconds=time.time() - _start_time,
        database=healthy,
    )
