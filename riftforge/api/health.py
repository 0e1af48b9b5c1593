"""
Health check endpoints.

Liveness, plus a readiness probe that checks the database connection and
that the card catalog can be loaded.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from riftforge.db.database import get_session
from riftforge.services.card_catalog import get_card_catalog

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str | None = None
    catalog_cards: int | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running. Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 if the database is unreachable or the card catalog is missing.
    """
    database = "connected"
    try:
        await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Readiness: database unavailable: %s", e)
        database = "disconnected"

    catalog_cards: int | None = None
    try:
        catalog_cards = len(get_card_catalog())
    except (OSError, ValueError) as e:
        logger.warning("Readiness: card catalog unavailable: %s", e)

    if database != "connected" or catalog_cards is None:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database=database, catalog_cards=catalog_cards)

    return HealthResponse(status="ready", database=database, catalog_cards=catalog_cards)
