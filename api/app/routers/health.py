"""
Health Check Endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from typing import Optional
import redis.asyncio as redis

from app.config import settings
from app.utils.database import get_db
from app.utils.redis import get_redis

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "wanderlux-api"}


@router.get("/health/ready")
async def readiness_check(
    db: AsyncSession = Depends(get_db),
    cache: Optional[redis.Redis] = Depends(get_redis),
):
    """
    Readiness check - verifies all dependencies are available
    """
    checks = {
        "postgres": False,
        "redis": False,
    }

    # Check PostgreSQL
    if settings.STORAGE_BACKEND == "memory":
        checks["postgres"] = True
        checks["storage"] = "memory"
    else:
        try:
            await db.execute(text("SELECT 1"))
            checks["postgres"] = True
        except Exception as e:
            checks["postgres_error"] = str(e)

    # Check Redis
    if cache is not None:
        checks["redis"] = True
    else:
        checks["redis_error"] = "unavailable"

    # Overall status
    all_healthy = all([checks["postgres"], checks["redis"]])

    return {
        "status": "ready" if all_healthy else "degraded",
        "checks": checks
    }


@router.get("/health/live")
async def liveness_check():
    """Liveness check - is the service running"""
    return {"status": "alive"}
