"""Health check endpoints."""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from ...config import settings
from ...core.redis_client import redis_client

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Liveness check - always returns ok if app is running.

    Returns:
        dict: Health status
    """
    return {"status": "healthy", "environment": settings.environment}


@router.get("/health/ready")
def readiness_check():
    """
    Readiness check - checks Redis, which holds the scheduler state and Celery queue.

    Returns:
        dict: Readiness status with dependency checks
    """
    errors = []

    try:
        redis_client.ping()
    except RedisError as e:
        errors.append(f"redis: {str(e)}")

    if errors:
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "errors": errors}
        )

    return {"status": "ready", "redis": "ok"}
