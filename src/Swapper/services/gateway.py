"""Collaborator contracts consumed by the quote lifecycle.

``QuoteService`` depends only on these protocols, so tests can substitute
doubles and the OKX client can be swapped for another venue.
"""

from decimal import Decimal
from typing import Protocol

from Swapper.models.enums import Side
from Swapper.models.order_book import OrderBookSnapshot
from Swapper.models.quote import Quote


class ExchangeGateway(Protocol):
    """Source of order book snapshots and executor of confirmed swaps."""

    async def fetch_order_book(self, pair: str) -> OrderBookSnapshot:
        """Return a snapshot with asks ascending and bids descending.

        Raises:
            ProviderUnavailableError: If the book cannot be fetched.
        """
        ...

    async def execute(self, pair: str, side: Side, volume: Decimal, price: Decimal) -> str:
        """Place the swap on the exchange and return its execution id.

        Raises:
            ProviderExecutionError: With the provider's message, unmodified.
        """
        ...


class QuoteStore(Protocol):
    """Durable home of quotes once they have been priced."""

    async def save(self, quote: Quote) -> Quote:
        """Persist *quote*, assigning an id on first save."""
        ...

    async def find_by_id(self, quote_id: int) -> Quote | None:
        """Return the stored quote or None."""
        ...

    async def claim(self, quote_id: int) -> bool:
        """Move quote *quote_id* from Open to Confirming.

        Returns:
            True for exactly one caller per quote; False if it was not Open.
        """
        ...
