"""Health check endpoints."""

from fastapi import APIRouter, Response, status
from starlette.concurrency import run_in_threadpool

from src.config import get_settings
from src.core.database import DatabaseConnection


router = APIRouter(prefix="/health", tags=["health"])


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - the process is up and serving."""
    return {"status": "alive"}


@router.get(
    "/ready",
    responses={503: {"description": "Database unreachable"}},
)
async def readiness(response: Response) -> dict[str, str | bool]:
    """Readiness probe - 503 until the database answers a trivial query."""
    settings = get_settings()
    database_ok = await run_in_threadpool(DatabaseConnection.ping)
    if not database_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {
        "status": "ready" if database_ok else "unavailable",
        "environment": settings.environment,
        "debug": settings.debug,
        "database": database_ok,
    }


@router.get("")
async def health() -> dict[str, str]:
    """Application identity for dashboards."""
    settings = get_settings()
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }
