"""
Health check endpoint.
"""
from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db, ping

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check: verifies database connectivity."""
    base = {
        "environment": settings.environment,
        "version": settings.app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    try:
        await ping(db)
    except SQLAlchemyError as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={**base, "status": "unhealthy", "database": False, "error": str(e)},
        )
    return {**base, "status": "healthy", "database": True}
