"""Swap endpoints: service status, quote creation, and quote confirmation.

Request bodies are validated here; pricing, persistence, and execution are
delegated to ``QuoteService``. Domain errors propagate to the handlers in
``Swapper.web.middleware``.
"""

import logging
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field

from Swapper.models.enums import Side
from Swapper.models.quote import QuoteOffer, SwapExecution
from Swapper.services.quote_service import QuoteService
from Swapper.web.deps import get_quote_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["swap"])

STATUS_TEXT = "Swapper is alive"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CreateSwapRequest(BaseModel):
    """Request body for pricing a new swap quote."""

    model_config = ConfigDict(frozen=True)

    pair: str = Field(min_length=7, max_length=9, description="Instrument id, e.g. BTC-USDT")
    side: Side
    volume: Decimal = Field(gt=0, description="Requested volume as a decimal string")


class ConfirmSwapRequest(BaseModel):
    """Request body for confirming a previously created quote."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    swap_id: int = Field(alias="swapId")


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/status", response_class=PlainTextResponse)
async def swapper_status() -> str:
    """Liveness check."""
    return STATUS_TEXT


@router.post("/createSwapOrder", response_model=QuoteOffer)
async def create_swap_order(
    body: CreateSwapRequest,
    service: Annotated[QuoteService, Depends(get_quote_service)],
) -> QuoteOffer:
    """Price a swap against the live order book and hold the offer open."""
    quote = await service.create_quote(body.pair, body.side, body.volume)
    logger.info("Swap order %s created for %s %s %s", quote.id, body.side, body.volume, body.pair)
    return QuoteOffer.from_quote(quote)


@router.post("/confirmSwapOrder", response_model=SwapExecution)
async def confirm_swap_order(
    body: ConfirmSwapRequest,
    service: Annotated[QuoteService, Depends(get_quote_service)],
) -> SwapExecution:
    """Execute a previously created, still valid swap offer."""
    quote = await service.confirm_quote(body.swap_id)
    return SwapExecution.from_quote(quote)
