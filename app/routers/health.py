"""
Health check endpoint.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from datetime import datetime, timezone
import logging

from app.database import get_db
from app.dependencies.services import get_completion_client
from app.models.schemas import HealthCheckResponse
from app.services.completion_client import MatchaCompletionClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthCheckResponse)
async def health_check(
    db: AsyncSession = Depends(get_db),
    completion_client: MatchaCompletionClient = Depends(get_completion_client),
):
    """
    Health check endpoint to verify system status.

    Returns:
        HealthCheckResponse with status of the database and the completion API
        configuration. The completion API itself is not called.
    """
    # Check database connection
    db_status = "ok"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "error"

    completion_status = "ok" if completion_client.is_configured else "unconfigured"

    # Overall status
    overall_status = "healthy" if db_status == "ok" and completion_status == "ok" else "degraded"

    return HealthCheckResponse(
        status=overall_status,
        database=db_status,
        completion_api=completion_status,
        timestamp=datetime.now(timezone.utc),
    )
