"""
Health check router.

Provides liveness and readiness endpoints.
"""

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..database import get_db
from ..query.builder import utcnow

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: str
    service: str = settings.SERVICE_NAME
    version: str = settings.SERVICE_VERSION


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict
    timestamp: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
async def health_check():
    """Liveness check; returns 200 while the process is running."""
    return HealthResponse(status="healthy", timestamp=utcnow().isoformat())


@router.get("/ready", response_model=ReadinessResponse, summary="Readiness check")
async def readiness_check(db: Session = Depends(get_db)):
    """Readiness check; 503 when the database cannot be reached."""
    try:
        db.execute(text("SELECT 1"))
        database = "healthy"
    except SQLAlchemyError as e:
        logger.warning("Database readiness check failed", error=str(e))
        database = "unhealthy"

    response = ReadinessResponse(
        ready=database == "healthy",
        checks={"database": database},
        timestamp=utcnow().isoformat(),
    )
    if not response.ready:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response.model_dump(),
        )
    return response
