"""Volume-weighted pricing of a requested volume against order book depth.

The walk consumes levels in the snapshot's stored priority order (best price
first), takes whole levels while they are smaller than what is still needed,
and takes only the remainder from the level that completes the fill. The
resulting price is the average over the *requested* volume, so each level's
contribution is ``price * taken / requested``.

All arithmetic runs in a widened decimal context. Notional is accumulated
exactly and divided by the requested volume once, at the end.
"""

import decimal
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Final

from Swapper.models.enums import Side
from Swapper.models.order_book import OrderBookSnapshot
from Swapper.utils.exceptions import UnderLiquidityError

logger = logging.getLogger(__name__)

# Digits of working precision for the walk. Wide enough that products of
# exchange prices and sizes never round.
PRICING_PRECISION: Final[int] = 60

UNDER_LIQUIDITY_MESSAGE: Final[str] = "Not enough orders to fulfill the swap"


@dataclass(frozen=True)
class LevelFill:
    """Volume taken from a single price level."""

    price: Decimal
    volume: Decimal


@dataclass(frozen=True)
class BookFill:
    """Outcome of a complete walk: per-level fills and the resulting VWAP."""

    requested: Decimal
    fills: tuple[LevelFill, ...]
    price: Decimal

    @property
    def filled(self) -> Decimal:
        """Total volume taken across all levels."""
        return sum((fill.volume for fill in self.fills), Decimal("0"))

    def contributions(self) -> list[Decimal]:
        """Each level's share of the final price: ``price * taken / requested``."""
        with decimal.localcontext(prec=PRICING_PRECISION):
            return [fill.price * fill.volume / self.requested for fill in self.fills]


def walk_book(book: OrderBookSnapshot, side: Side, volume: Decimal) -> BookFill:
    """Fill *volume* from the side of *book* that a *side* swap consumes.

    Args:
        book: Snapshot to price against. Its level order is authoritative.
        side: ``Side.BUY`` walks the asks, ``Side.SELL`` walks the bids.
        volume: Requested volume. Must be positive.

    Returns:
        A ``BookFill`` with the levels touched and the unrounded VWAP.

    Raises:
        ValueError: If *volume* is zero or negative.
        UnderLiquidityError: If the book runs out before *volume* is filled.
    """
    if volume <= 0:
        msg = f"Requested volume must be positive, got {volume}"
        raise ValueError(msg)

    fills: list[LevelFill] = []
    filled = Decimal("0")
    notional = Decimal("0")

    with decimal.localcontext(prec=PRICING_PRECISION):
        for level in book.levels_for(side):
            available = level.available
            remaining = volume - filled

            take_whole_level = available < remaining
            taken = available if take_whole_level else remaining

            notional += level.price * taken
            filled += taken
            fills.append(LevelFill(price=level.price, volume=taken))

            if not take_whole_level:
                break

        if filled < volume:
            logger.info(
                "Under-liquidity pricing %s %s %s: book filled only %s",
                side,
                volume,
                book.pair,
                filled,
            )
            raise UnderLiquidityError(
                UNDER_LIQUIDITY_MESSAGE,
                pair=book.pair,
                side=side,
                volume=volume,
                filled=filled,
            )

        price = notional / volume

    logger.debug(
        "Priced %s %s %s across %d level(s): vwap=%s",
        side,
        volume,
        book.pair,
        len(fills),
        price,
    )
    return BookFill(requested=volume, fills=tuple(fills), price=price)


def price_volume(book: OrderBookSnapshot, side: Side, volume: Decimal) -> Decimal:
    """Return the volume-weighted price for filling *volume* from *book*.

    See :func:`walk_book` for arguments and raised errors.
    """
    return walk_book(book, side, volume).price
