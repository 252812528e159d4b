"""Health and monitoring API endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rentevent.core.config import settings
from rentevent.core.logging_config import get_logger
from rentevent.db.models import Image, Provider, Service
from rentevent.db.session import get_session


logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("")
async def health_check():
    """Basic health check for load balancers.

    Returns:
        dict: Health status with service info and timestamp
    """
    return {
        "status": "healthy",
        "service": settings.SERVICE_NAME,
        "version": settings.VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/ready")
async def readiness_check(session: AsyncSession = Depends(get_session)):
    """Readiness probe: database reachable, plus catalog counts.

    Returns:
        JSONResponse: 200 when ready, 503 when the database is unreachable
    """
    try:
        await session.execute(text("SELECT 1"))
        counts = {}
        for label, model in (("providers", Provider), ("services", Service), ("images", Image)):
            result = await session.execute(select(func.count()).select_from(model))
            counts[label] = result.scalar_one()
    except SQLAlchemyError as e:
        logger.error("readiness_check_failed", error_type=type(e).__name__, error=str(e))
        return JSONResponse(
            status_code=503,
            content={"status": "unavailable", "database": "unreachable"},
        )

    return {
        "status": "ready",
        "database": "ok",
        "image_store_backend": settings.IMAGE_STORE_BACKEND,
        "catalog": counts,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
