import logging
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from inventory_api.config import Settings

router = APIRouter(prefix="/health", tags=["Health"])
logger = logging.getLogger(__name__)


def _database_check(request: Request) -> dict:
    try:
        latency = request.app.state.database.ping()
    except SQLAlchemyError as exc:
        logger.warning("Database health check failed: %s", exc)
        return {"status": "unhealthy", "message": "Database health check failed", "latencyMs": None}
    return {"status": "healthy", "message": "Database connection successful", "latencyMs": round(latency, 2)}


def _uptime_seconds(request: Request) -> float:
    return round(time.monotonic() - request.app.state.started_at, 1)


@router.get("")
def health_check(request: Request):
    settings: Settings = request.app.state.settings
    database = _database_check(request)
    healthy = database["status"] == "healthy"
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
            "time": datetime.now(timezone.utc).isoformat(),
            "uptime": _uptime_seconds(request),
            "database": database,
        },
    )


@router.get("/detailed")
def detailed_health_check(request: Request):
    checks = {
        "database": _database_check(request),
        "api": {"status": "healthy", "message": "API is running", "uptime": _uptime_seconds(request)},
    }
    healthy = all(check["status"] == "healthy" for check in checks.values())
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "time": datetime.now(timezone.utc).isoformat(),
            "checks": checks,
        },
    )


__all__ = ["router"]
