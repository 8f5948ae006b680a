"""Health check endpoints."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError

router = APIRouter(tags=["health"])

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    database: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
)
async def health_check(request: Request) -> HealthResponse:
    """Check API and database health."""
    session_factory = request.app.state.session_factory
    db_status = "not_configured"
    if session_factory is not None:
        db_status = "unhealthy"
        try:
            async with session_factory() as session:
                await session.execute(text("SELECT 1"))
            db_status = "healthy"
        except (DBAPIError, OSError):
            logger.warning("Database health check failed", exc_info=True)

    return HealthResponse(
        status="degraded" if db_status == "unhealthy" else "healthy",
        timestamp=datetime.now(timezone.utc),
        database=db_status,
    )


@router.get("/ready", status_code=status.HTTP_200_OK)
async def readiness_check(request: Request) -> JSONResponse:
    """Readiness check for container orchestration.

    Ready once both services are wired; reports the business timezone
    that decides "today" for punches and corrections.
    """
    state = request.app.state
    if getattr(state, "attendance_service", None) is None or getattr(
        state, "salary_service", None
    ) is None:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready"},
        )
    return JSONResponse(
        content={"status": "ready", "business_timezone": state.settings.business_timezone}
    )


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> dict[str, str]:
    """Liveness check for container orchestration."""
    return {"status": "alive"}
