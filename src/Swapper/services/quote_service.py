"""Quote lifecycle: pricing new quotes and confirming open ones.

``QuoteService`` is the only component that moves a quote between states::

    Pricing --priced--> Open --claimed--> Confirming --executed--> Confirmed
                          |                           `--gateway rejects--> ConfirmFailed
                          `--confirm at/after expires_at--> Expired

A pricing failure never produces a quote. Expiry is observed lazily, on the
next confirmation attempt; nothing sweeps open quotes in the background.
Failed confirmations are terminal and never retried here.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable
from decimal import Decimal

from Swapper.config import Settings
from Swapper.models.enums import NotConfirmableReason, QuoteState, Side
from Swapper.models.quote import Quote
from Swapper.pricing.fees import apply_fee
from Swapper.pricing.formatting import round_price
from Swapper.pricing.vwap import walk_book
from Swapper.services.gateway import ExchangeGateway, QuoteStore
from Swapper.utils.exceptions import (
    NotConfirmableError,
    ProviderExecutionError,
    QuoteNotFoundError,
)

logger = logging.getLogger(__name__)


def utc_now() -> datetime.datetime:
    """Default clock: timezone-aware current UTC time."""
    return datetime.datetime.now(datetime.UTC)


class QuoteService:
    """Orchestrates pricing, persistence, and confirmation of swap quotes.

    Collaborators are injected per request so a test can pass doubles.

    Usage::

        service = QuoteService(gateway=gateway, store=QuoteRepository(db), settings=settings)
        quote = await service.create_quote("BTC-USDT", Side.BUY, Decimal("1000"))
        confirmed = await service.confirm_quote(quote.id)
    """

    def __init__(
        self,
        *,
        gateway: ExchangeGateway,
        store: QuoteStore,
        settings: Settings,
        clock: Callable[[], datetime.datetime] = utc_now,
    ) -> None:
        self._gateway = gateway
        self._store = store
        self._settings = settings
        self._clock = clock

    # ------------------------------------------------------------------
    # Lifecycle transitions
    # ------------------------------------------------------------------

    async def price_new_quote(self, pair: str, side: Side, volume: Decimal) -> Quote:
        """Price a fresh quote against one order book snapshot.

        Returns:
            An Open quote without an id.

        Raises:
            ValueError: If *volume* is not positive.
            UnderLiquidityError: If the book cannot fill *volume*.
            ProviderUnavailableError: If the snapshot cannot be fetched.
        """
        quote = Quote(pair=pair, side=side, volume=volume)

        book = await self._gateway.fetch_order_book(pair)
        fill = walk_book(book, side, volume)

        fee_percent = self._settings.fees.percent_for(side)
        offered = apply_fee(fill.price, side, fee_percent)

        created_at = self._clock()
        decimals = self._settings.price_decimals
        opened = quote.model_copy(
            update={
                "provider_price": round_price(fill.price, decimals),
                "offered_price": round_price(offered, decimals),
                "created_at": created_at,
                "expires_at": created_at + self._settings.validity_window,
                "state": QuoteState.OPEN,
            }
        )
        logger.info(
            "Quote priced: %s %s %s provider=%s offered=%s fee=%s%% levels=%d",
            side,
            volume,
            pair,
            opened.provider_price,
            opened.offered_price,
            fee_percent,
            len(fill.fills),
        )
        return opened

    def check_confirmable(self, quote: Quote, now: datetime.datetime) -> None:
        """Raise unless *quote* may be executed at *now*.

        An Expired quote, or an Open one whose window has closed, is refused
        with reason EXPIRED. Every other non-Open state is WRONG_STATE.

        Raises:
            NotConfirmableError: With the specific reason.
        """
        if quote.state == QuoteState.EXPIRED or (
            quote.state == QuoteState.OPEN and quote.is_expired(now)
        ):
            msg = f"Swap {quote.id} offer expired at {quote.expires_at}"
            raise NotConfirmableError(
                msg,
                quote_id=quote.id,
                reason=NotConfirmableReason.EXPIRED,
            )

        if quote.state != QuoteState.OPEN:
            msg = f"Swap {quote.id} cannot be confirmed in state '{quote.state}'"
            raise NotConfirmableError(
                msg,
                quote_id=quote.id,
                reason=NotConfirmableReason.WRONG_STATE,
            )

    async def confirm(self, quote: Quote) -> Quote:
        """Execute an Open, unexpired quote through the gateway.

        Returns:
            The Confirmed copy of *quote*.

        Raises:
            NotConfirmableError: If *quote* has expired or is not Open
                (see :meth:`mark_expired` for the Expired copy).
            ProviderExecutionError: If the gateway rejects execution.
                ``exc.quote`` holds the ConfirmFailed copy.
        """
        self.check_confirmable(quote, self._clock())
        return await self._execute(quote)

    def mark_expired(self, quote: Quote) -> Quote:
        """Return the Expired copy of an Open quote."""
        return quote.model_copy(update={"state": QuoteState.EXPIRED})

    async def _execute(self, quote: Quote) -> Quote:
        assert quote.offered_price is not None  # noqa: S101
        try:
            execution_id = await self._gateway.execute(
                quote.pair,
                quote.side,
                quote.volume,
                quote.offered_price,
            )
        except ProviderExecutionError as exc:
            exc.quote = quote.model_copy(
                update={"state": QuoteState.CONFIRM_FAILED, "failure_reason": str(exc)}
            )
            logger.warning("Swap %s confirmation rejected by provider: %s", quote.id, exc)
            raise

        confirmed = quote.model_copy(
            update={
                "state": QuoteState.CONFIRMED,
                "executed_at": self._clock(),
                "execution_id": execution_id,
            }
        )
        logger.info("Swap %s confirmed: execution_id=%s", quote.id, execution_id)
        return confirmed

    # ------------------------------------------------------------------
    # Boundary operations (price/confirm plus persistence)
    # ------------------------------------------------------------------

    async def create_quote(self, pair: str, side: Side, volume: Decimal) -> Quote:
        """Price a new quote and persist it.

        Returns:
            The Open quote with its store-assigned id.
        """
        quote = await self.price_new_quote(pair, side, volume)
        return await self._store.save(quote)

    async def confirm_quote(self, quote_id: int) -> Quote:
        """Load, claim, confirm, and persist the outcome of quote *quote_id*.

        The quote is claimed in the store (Open to Confirming) before the
        gateway is called, so concurrent confirmations of one id execute at
        most once. The resulting state (Confirmed, ConfirmFailed, or Expired)
        is saved before this method returns or raises.

        Raises:
            QuoteNotFoundError: If no quote has *quote_id*.
            NotConfirmableError: If the quote is expired, not Open, or
                already claimed by another confirmation.
            ProviderExecutionError: If the gateway rejects execution.
        """
        quote = await self._store.find_by_id(quote_id)
        if quote is None:
            raise QuoteNotFoundError(quote_id)

        try:
            self.check_confirmable(quote, self._clock())
        except NotConfirmableError as exc:
            if exc.reason == NotConfirmableReason.EXPIRED and quote.state == QuoteState.OPEN:
                await self._store.save(self.mark_expired(quote))
                logger.info("Swap %d expired before confirmation", quote_id)
            raise

        if not await self._store.claim(quote_id):
            msg = f"Swap {quote_id} is already being confirmed"
            raise NotConfirmableError(
                msg,
                quote_id=quote_id,
                reason=NotConfirmableReason.WRONG_STATE,
            )

        try:
            confirmed = await self._execute(quote)
        except ProviderExecutionError as exc:
            if exc.quote is not None:
                await self._store.save(exc.quote)
            raise

        return await self._store.save(confirmed)
