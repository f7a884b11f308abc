"""
Health check and metrics endpoints.
"""
from datetime import datetime, timezone
from typing import Any, Dict

import redis.asyncio as redis
from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from launchline.core.config import settings
from launchline.core.database import db_manager
from launchline.core.metrics import get_metrics, get_metrics_content_type

router = APIRouter(tags=["Health & Monitoring"])


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.app_version
    }


@router.get("/health/detailed")
async def detailed_health_check() -> JSONResponse:
    """Detailed health check with dependency status."""
    checks: Dict[str, Any] = {}

    if await db_manager.health_check():
        checks["database"] = {"status": "healthy"}
    else:
        checks["database"] = {"status": "unhealthy"}

    try:
        redis_client = redis.from_url(settings.redis_url)
        await redis_client.ping()
        await redis_client.aclose()
        checks["redis"] = {"status": "healthy"}
    except Exception as e:
        checks["redis"] = {"status": "unhealthy", "message": str(e)}

    overall_healthy = all(check["status"] == "healthy" for check in checks.values())

    return JSONResponse(
        status_code=status.HTTP_200_OK if overall_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if overall_healthy else "unhealthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.app_version,
            "checks": checks,
        },
    )


@router.get("/metrics", include_in_schema=False)
async def metrics():
    """Prometheus exposition."""
    return Response(content=get_metrics(), media_type=get_metrics_content_type())
