import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from src.config.database import async_session_manager

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthCheckResponse(BaseModel):
    status: str
    database: str
    version: str = "0.1.0"


async def check_database() -> bool:
    try:
        async with async_session_manager(auto_commit=False) as session:
            await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Database health check failed")
        return False
    return True


@router.get("/", response_model=HealthCheckResponse, responses={503: {"model": HealthCheckResponse}})
async def health_check(database_ok: bool = Depends(check_database)):
    """
    Health check endpoint to verify the API and its database are reachable.
    """
    if not database_ok:
        body = HealthCheckResponse(status="degraded", database="unavailable")
        return JSONResponse(status_code=503, content=body.model_dump())
    return HealthCheckResponse(status="healthy", database="ok")
