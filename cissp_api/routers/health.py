from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import structlog

from cissp_api.dependencies import DbSession
from cissp_api.utils.config import settings

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["health"])


@router.get("/")
def read_root():
    return {"status": f"{settings.PROJECT_NAME} is running", "version": settings.VERSION}


@router.get("/api/health")
def health_check(session: DbSession):
    try:
        session.exec(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error("health_database_failed", error=str(e))
        database = "unavailable"
    return {"status": "ok" if database == "ok" else "degraded", "database": database}
