"""Quote models: the persisted swap quote and its public response views.

A Quote is frozen. State transitions are expressed as ``model_copy(update=...)``
and performed only by ``QuoteService``, so every copy that leaves the service
is a consistent snapshot of one lifecycle state.
"""

import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_serializer

from Swapper.models.enums import QuoteState, Side


class Quote(BaseModel):
    """A priced, time-bounded offer to swap ``volume`` of ``pair``.

    ``provider_price`` is the raw market VWAP and stays internal for
    diagnostics and auditing. ``offered_price`` is what the user sees after
    the directional fee.
    """

    model_config = ConfigDict(frozen=True)

    id: int | None = None
    pair: str
    side: Side
    volume: Decimal
    provider_price: Decimal | None = None
    offered_price: Decimal | None = None
    created_at: datetime.datetime | None = None
    expires_at: datetime.datetime | None = None
    state: QuoteState = QuoteState.PRICING
    executed_at: datetime.datetime | None = None
    execution_id: str | None = None
    failure_reason: str | None = None

    @field_serializer("volume", "provider_price", "offered_price")
    def serialize_decimal(self, value: Decimal | None) -> str | None:
        """Serialize Decimal fields as strings to preserve precision."""
        return None if value is None else str(value)

    def is_expired(self, now: datetime.datetime) -> bool:
        """True once ``now`` has reached ``expires_at``."""
        return self.expires_at is not None and now >= self.expires_at


class QuoteOffer(BaseModel):
    """Public response for a newly created quote. Excludes ``provider_price``."""

    model_config = ConfigDict(frozen=True)

    id: int
    pair: str
    side: Side
    volume: Decimal
    offered_price: Decimal
    created_at: datetime.datetime
    expires_at: datetime.datetime

    @field_serializer("volume", "offered_price")
    def serialize_decimal(self, value: Decimal) -> str:
        """Serialize Decimal fields as strings to preserve precision."""
        return str(value)

    @classmethod
    def from_quote(cls, quote: Quote) -> "QuoteOffer":
        """Project an Open, persisted quote onto its public fields."""
        if (
            quote.id is None
            or quote.offered_price is None
            or quote.created_at is None
            or quote.expires_at is None
        ):
            msg = f"Quote is not open and persisted (state={quote.state}, id={quote.id})."
            raise ValueError(msg)
        return cls(
            id=quote.id,
            pair=quote.pair,
            side=quote.side,
            volume=quote.volume,
            offered_price=quote.offered_price,
            created_at=quote.created_at,
            expires_at=quote.expires_at,
        )


class SwapExecution(BaseModel):
    """Public response for a confirmed swap."""

    model_config = ConfigDict(frozen=True)

    id: int
    pair: str
    side: Side
    volume: Decimal
    offered_price: Decimal
    executed_at: datetime.datetime

    @field_serializer("volume", "offered_price")
    def serialize_decimal(self, value: Decimal) -> str:
        """Serialize Decimal fields as strings to preserve precision."""
        return str(value)

    @classmethod
    def from_quote(cls, quote: Quote) -> "SwapExecution":
        """Project a Confirmed quote onto its public fields."""
        if quote.id is None or quote.offered_price is None or quote.executed_at is None:
            msg = f"Quote is not confirmed (state={quote.state}, id={quote.id})."
            raise ValueError(msg)
        return cls(
            id=quote.id,
            pair=quote.pair,
            side=quote.side,
            volume=quote.volume,
            offered_price=quote.offered_price,
            executed_at=quote.executed_at,
        )
