"""Order book models: price levels and point-in-time depth snapshots.

All price and size fields use Decimal (constructed from strings) with custom
serializers to prevent silent float conversion in JSON roundtrips.
"""

import datetime
from collections.abc import Sequence
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_serializer, model_validator

from Swapper.models.enums import Side


class PriceLevel(BaseModel):
    """One row of order book depth.

    ``size * multiplier`` is the nominal capacity of the level and
    ``liquidated`` is the part of it already consumed elsewhere.
    """

    model_config = ConfigDict(frozen=True)

    price: Decimal
    size: Decimal
    liquidated: Decimal = Decimal("0")
    multiplier: Decimal = Decimal("1")

    @model_validator(mode="after")
    def check_liquidated_within_size(self) -> "PriceLevel":
        """Enforce 0 <= liquidated <= size."""
        if self.liquidated < 0 or self.liquidated > self.size:
            msg = f"liquidated ({self.liquidated}) must be between 0 and size ({self.size})"
            raise ValueError(msg)
        return self

    @field_serializer("price", "size", "liquidated", "multiplier")
    def serialize_decimal(self, value: Decimal) -> str:
        """Serialize Decimal fields as strings to preserve precision."""
        return str(value)

    @property
    def available(self) -> Decimal:
        """Remaining capacity: nominal capacity minus liquidated size."""
        return self.size * self.multiplier - self.liquidated

    @classmethod
    def from_row(cls, row: Sequence[str]) -> "PriceLevel":
        """Build a level from an exchange depth row ``[price, size, liquidated, units]``."""
        price, size, liquidated, multiplier = row[:4]
        return cls(
            price=Decimal(price),
            size=Decimal(size),
            liquidated=Decimal(liquidated),
            multiplier=Decimal(multiplier),
        )


class OrderBookSnapshot(BaseModel):
    """Ask and bid depth for one pair at a point in time.

    Frozen because a snapshot is fetched once per pricing call and must stay
    internally consistent for the whole walk. Asks are stored ascending and
    bids descending, as delivered by the exchange; nothing here re-sorts them.
    """

    model_config = ConfigDict(frozen=True)

    pair: str
    asks: tuple[PriceLevel, ...]
    bids: tuple[PriceLevel, ...]
    observed_at: datetime.datetime

    def levels_for(self, side: Side) -> tuple[PriceLevel, ...]:
        """Return the side of the book a swap consumes: asks to buy, bids to sell."""
        return self.asks if side == Side.BUY else self.bids
