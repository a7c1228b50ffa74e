"""
Health Check Endpoints
---------------------
Liveness endpoint shared by the auth service and the admin gateway.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from loguru import logger

router = APIRouter(prefix="/api/v1/health", tags=["Health"])


@router.get("/")
async def health_check(request: Request):
    """
    Basic health check endpoint.
    Returns service status and version information.
    """
    logger.debug("Health check requested")

    return {
        "service": request.app.title,
        "status": "healthy",
        "version": request.app.version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
