"""Final quantization of prices for storage and display."""

import decimal
from decimal import ROUND_HALF_UP, Decimal
from typing import Final

from Swapper.pricing.vwap import PRICING_PRECISION

DEFAULT_PRICE_DECIMALS: Final[int] = 2


def round_price(value: Decimal, decimals: int = DEFAULT_PRICE_DECIMALS) -> Decimal:
    """Quantize *value* to *decimals* places, rounding half up.

    This is the only rounding step in the pricing path.
    """
    with decimal.localcontext(prec=PRICING_PRECISION):
        return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def format_price(value: Decimal, decimals: int = DEFAULT_PRICE_DECIMALS) -> str:
    """Render a rounded price as a plain string: no exponent, no separators."""
    return f"{round_price(value, decimals):f}"
