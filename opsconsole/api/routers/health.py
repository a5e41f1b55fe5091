# opsconsole/api/routers/health.py

import logging

from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from opsconsole.api.dependencies import DbSession
from opsconsole.config.settings import get_settings

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health(request: Request, db: DbSession):
    """Liveness plus a database round trip. No principal required; a failed check reports degraded, not 5xx."""
    settings = get_settings()
    database = "ok"
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.warning("health_database_unavailable", extra={"error": str(e)})
        database = "unavailable"
    return {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
        "correlation_id": request.state.correlation_id,
        "environment": settings.environment,
        "version": settings.version,
    }
