"""
Health checks - for load balancers, Kubernetes, and monitoring.
Challenge: Fast liveness; database round trip for readiness.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from marketplace.config import get_settings
from marketplace.db.session import DbSession

logger = logging.getLogger(__name__)

router = APIRouter()
settings = get_settings()


@router.get("")
async def health():
    """Liveness: is the process up?"""
    return {"status": "ok", "app": settings.app_name}


@router.get("/ready")
async def ready(session: DbSession):
    """Readiness: can the catalog store be reached?"""
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Readiness check failed", exc_info=True)
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ready"}
