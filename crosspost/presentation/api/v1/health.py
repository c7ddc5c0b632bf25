import structlog
from fastapi import APIRouter, Response, status

from ....infrastructure.logging import Timer
from ..dependencies import get_database

router = APIRouter(tags=["health"])
logger = structlog.get_logger()


@router.get("/health", summary="Liveness check")
async def health() -> dict:
    return {"status": "healthy"}


@router.get("/health/ready", summary="Readiness check")
async def readiness(response: Response) -> dict:
    """Ping the database. Answers 503 while it is unreachable."""
    try:
        with Timer() as timer:
            await get_database().ping()
    except Exception as e:
        logger.error("Readiness check failed", check="database", error=str(e))
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {
            "status": "degraded",
            "checks": {"database": {"status": "unhealthy", "error": type(e).__name__}},
        }

    return {
        "status": "ready",
        "checks": {"database": {"status": "healthy", "latency_ms": timer.duration_ms}},
    }
