"""
Receipegram Health Check Endpoints
Liveness and database readiness probes
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
import asyncio
import time

from core.database import DatabaseHealthCheck
from core.config import settings

router = APIRouter()


@router.get("")
async def health_check():
    """Basic health check endpoint"""
    return {
        "message": f"{settings.APP_NAME} API is running!",
        "status": "healthy",
        "version": settings.VERSION,
    }


@router.get("/ready")
async def readiness_check():
    """
    Readiness probe endpoint
    Checks that the database answers within the timeout
    """
    try:
        db_healthy = await asyncio.wait_for(DatabaseHealthCheck.check_connection(), timeout=5.0)
    except asyncio.TimeoutError:
        db_healthy = False

    if not db_healthy:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "database": "disconnected"},
        )

    return {
        "status": "ready",
        "database": "connected",
        "pool": DatabaseHealthCheck.get_connection_info(),
        "timestamp": time.time(),
    }
