"""
System API Endpoints.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import ORJSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db, ping_db

router = APIRouter()


@router.get("/health")
async def health(db: AsyncSession = Depends(get_db)) -> ORJSONResponse:
    """Check database connectivity."""
    try:
        await ping_db(db)
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Health check failed: {e}")
        return ORJSONResponse({"ok": False}, status_code=500)
    return ORJSONResponse({"ok": True})
