"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Depends
from starlette.responses import JSONResponse

from src.bookshelf.api.http.deps import get_storage_gateway
from src.bookshelf.core.services import StorageGateway
from src.bookshelf.runtime.context import get_config

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health() -> dict[str, str]:
    """Liveness probe.

    Returns 200 OK as long as the application process is running. It does
    not check the database.
    """
    return {"status": "healthy", "service": "bookshelf"}


@router.get("/ready", response_model=None)
def readiness(
    storage: StorageGateway = Depends(get_storage_gateway),
) -> dict[str, Any] | JSONResponse:
    """Readiness probe: 200 when the database answers, 503 otherwise."""
    config = get_config()
    db_healthy = storage.health_check()

    response = {
        "status": "ready" if db_healthy else "not_ready",
        "environment": config.app.environment,
        "checks": {
            "database": {
                "status": "healthy" if db_healthy else "unhealthy",
                "dialect": storage.engine.dialect.name,
                "pool": storage.get_pool_status(),
            }
        },
    }

    if not db_healthy:
        return JSONResponse(status_code=503, content=response)
    return response
