"""Dependency injection providers for FastAPI route handlers.

All shared resources (Settings, Database, the OKX gateway) are created once
during application lifespan startup and stored on ``app.state``. Route
handlers never construct these directly; they declare a ``QuoteService``
dependency and FastAPI assembles a fresh one per request.
"""

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request

from Swapper.config import Settings
from Swapper.data.database import Database
from Swapper.data.repository import QuoteRepository
from Swapper.services.gateway import ExchangeGateway
from Swapper.services.quote_service import QuoteService

logger = logging.getLogger(__name__)


async def get_settings(request: Request) -> Settings:
    """Return the process-wide, read-only Settings."""
    settings: Settings = request.app.state.settings
    return settings


async def get_database(request: Request) -> AsyncGenerator[Database]:
    """Yield the Database instance from application state."""
    db: Database = request.app.state.database
    yield db


async def get_repository(
    db: Annotated[Database, Depends(get_database)],
) -> QuoteRepository:
    """Return a QuoteRepository backed by the shared Database."""
    return QuoteRepository(db)


async def get_gateway(request: Request) -> ExchangeGateway:
    """Return the app-wide exchange gateway (one pooled httpx client)."""
    gateway: ExchangeGateway = request.app.state.gateway
    return gateway


async def get_quote_service(
    settings: Annotated[Settings, Depends(get_settings)],
    repo: Annotated[QuoteRepository, Depends(get_repository)],
    gateway: Annotated[ExchangeGateway, Depends(get_gateway)],
) -> QuoteService:
    """Assemble a request-scoped QuoteService from the shared collaborators."""
    return QuoteService(gateway=gateway, store=repo, settings=settings)
