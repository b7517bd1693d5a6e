"""
Service dependencies for FastAPI routes.

The completion client is created once in the application lifespan and stored
on ``app.state``; persistence adapters are built per request around the
request's database session.
"""
from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.services.completion_client import MatchaCompletionClient
from app.services.persistence import PersistenceAdapter
from app.services.sow_generator import SowGenerator


async def get_persistence(db: AsyncSession = Depends(get_db)) -> PersistenceAdapter:
    return PersistenceAdapter(db)


async def get_completion_client(request: Request) -> MatchaCompletionClient:
    """Return the shared completion client opened by the lifespan."""
    return request.app.state.completion_client


async def get_sow_generator(
    persistence: PersistenceAdapter = Depends(get_persistence),
    completion_client: MatchaCompletionClient = Depends(get_completion_client),
) -> SowGenerator:
    return SowGenerator(persistence, completion_client)
