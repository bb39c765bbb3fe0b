"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Request
from starlette.responses import JSONResponse

from src.salsila.api.http.app_data import ApplicationDependencies
from src.salsila.runtime.context import get_config

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
async def health() -> dict[str, str]:
    """Liveness probe; does not check dependencies."""
    return {"status": "healthy", "service": "salsila"}


@router.get("/ready", response_model=None)
def readiness(request: Request) -> dict[str, Any] | JSONResponse:
    """Readiness probe.

    Returns 200 when the database answers, 503 otherwise.
    """
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    config = get_config()

    db_healthy = app_deps.database_service.health_check()
    response = {
        "status": "ready" if db_healthy else "not_ready",
        "environment": config.app.environment,
        "checks": {
            "database": {
                "status": "healthy" if db_healthy else "unhealthy",
                "type": "sqlite" if config.database.is_sqlite else "postgresql",
            }
        },
    }

    if not db_healthy:
        return JSONResponse(status_code=503, content=response)
    return response


@router.get("/database", response_model=None)
def health_database(request: Request) -> dict[str, Any] | JSONResponse:
    """Database health with connection pool status."""
    app_deps: ApplicationDependencies = request.app.state.app_dependencies

    db_healthy = app_deps.database_service.health_check()
    response = {
        "status": "healthy" if db_healthy else "unhealthy",
        "pool": app_deps.database_service.get_pool_status(),
    }
    if not db_healthy:
        return JSONResponse(status_code=503, content=response)
    return response
