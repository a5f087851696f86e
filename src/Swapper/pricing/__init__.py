"""Pricing engine: VWAP over order book depth, fees, and output rounding.

Re-exports all public functions so consumers can import directly:
    from Swapper.pricing import apply_fee, price_volume
"""

from Swapper.pricing.fees import FeeSchedule, apply_fee
from Swapper.pricing.formatting import format_price, round_price
from Swapper.pricing.vwap import BookFill, LevelFill, price_volume, walk_book

__all__ = [
    # VWAP
    "BookFill",
    "LevelFill",
    "price_volume",
    "walk_book",
    # Fees
    "FeeSchedule",
    "apply_fee",
    # Formatting
    "format_price",
    "round_price",
]
