"""Directional swap fee: markup when the user buys, markdown when they sell."""

import decimal
from dataclasses import dataclass
from decimal import Decimal
from typing import Final

from Swapper.models.enums import Side
from Swapper.pricing.vwap import PRICING_PRECISION

HUNDRED: Final[Decimal] = Decimal("100")


@dataclass(frozen=True)
class FeeSchedule:
    """Fee percentages keyed by side, e.g. ``Decimal("2")`` for 2%."""

    buy: Decimal
    sell: Decimal

    def percent_for(self, side: Side) -> Decimal:
        """Return the configured fee percentage for *side*."""
        return {Side.BUY: self.buy, Side.SELL: self.sell}[side]


def apply_fee(provider_price: Decimal, side: Side, fee_percent: Decimal) -> Decimal:
    """Turn a raw provider price into the price offered to the user.

    Buy: ``provider * (100 + fee) / 100``. Sell: ``provider * (100 - fee) / 100``.
    The range of *fee_percent* is not checked here; configuration does that.
    """
    if side == Side.BUY:
        factor = HUNDRED + fee_percent
    else:
        factor = HUNDRED - fee_percent
    with decimal.localcontext(prec=PRICING_PRECISION):
        return provider_price * factor / HUNDRED
