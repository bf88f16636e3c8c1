"""
Health check and monitoring endpoints.
"""
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request, Response, status

from orderdesk.core.config import settings
from orderdesk.core.database import ping_db

router = APIRouter(tags=["health"])


@router.get("/")
async def root() -> dict:
    """API root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Basic health check with process uptime in seconds."""
    started_at = request.app.state.started_at
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - started_at, 3),
    }


@router.get("/health/ready")
async def readiness_check(response: Response) -> dict:
    """
    Readiness probe - checks if the service can handle requests.
    Verifies database connectivity.
    """
    db_ok = await ping_db()
    if not db_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return {
        "status": "ready" if db_ok else "not_ready",
        "checks": {
            "database": "connected" if db_ok else "unavailable",
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/live")
async def liveness_check() -> dict:
    """
    Liveness probe - checks if the service is alive.
    Simple check that doesn't verify dependencies.
    """
    return {
        "status": "alive",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
