"""Pydantic v2 models, enums, and type definitions.

Re-exports all public models so consumers can import directly:
    from Swapper.models import OrderBookSnapshot, Quote, Side
"""

from Swapper.models.enums import NotConfirmableReason, QuoteState, Side
from Swapper.models.order_book import OrderBookSnapshot, PriceLevel
from Swapper.models.quote import Quote, QuoteOffer, SwapExecution

__all__ = [
    # Enums
    "NotConfirmableReason",
    "QuoteState",
    "Side",
    # Order book
    "OrderBookSnapshot",
    "PriceLevel",
    # Quotes
    "Quote",
    "QuoteOffer",
    "SwapExecution",
]
