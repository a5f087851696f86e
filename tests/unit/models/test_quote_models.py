"""Tests for Quote and its public response projections."""

import datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from Swapper.models import Quote, QuoteOffer, QuoteState, Side, SwapExecution

NOW = datetime.datetime(2025, 1, 15, 15, 30, 0, tzinfo=datetime.UTC)


@pytest.fixture()
def quote() -> Quote:
    return Quote(
        id=3,
        pair="BTC-USDT",
        side=Side.BUY,
        volume=Decimal("1000"),
        provider_price=Decimal("36713.50"),
        offered_price=Decimal("37447.77"),
        created_at=NOW,
        expires_at=NOW + datetime.timedelta(seconds=30),
        state=QuoteState.OPEN,
    )


class TestQuote:
    def test_starts_in_pricing(self) -> None:
        draft = Quote(pair="BTC-USDT", side=Side.SELL, volume=Decimal("1"))
        assert draft.state == QuoteState.PRICING
        assert draft.id is None
        assert draft.offered_price is None

    def test_frozen(self, quote: Quote) -> None:
        with pytest.raises(ValidationError):
            quote.state = QuoteState.CONFIRMED  # type: ignore[misc]

    def test_is_expired_boundary(self, quote: Quote) -> None:
        assert not quote.is_expired(NOW + datetime.timedelta(seconds=29, milliseconds=999))
        assert quote.is_expired(NOW + datetime.timedelta(seconds=30))

    def test_unpriced_quote_never_expires(self) -> None:
        draft = Quote(pair="BTC-USDT", side=Side.SELL, volume=Decimal("1"))
        assert not draft.is_expired(NOW)

    def test_json_keeps_decimal_text(self, quote: Quote) -> None:
        data = quote.model_dump(mode="json")
        assert data["provider_price"] == "36713.50"
        assert data["offered_price"] == "37447.77"
        assert data["volume"] == "1000"
        assert data["state"] == "open"


class TestQuoteOffer:
    def test_projection_hides_provider_price(self, quote: Quote) -> None:
        offer = QuoteOffer.from_quote(quote)
        data = offer.model_dump(mode="json")
        assert "provider_price" not in data
        assert data["offered_price"] == "37447.77"
        assert offer.expires_at == NOW + datetime.timedelta(seconds=30)

    def test_unpersisted_quote_rejected(self, quote: Quote) -> None:
        with pytest.raises(ValueError, match="not open and persisted"):
            QuoteOffer.from_quote(quote.model_copy(update={"id": None}))


class TestSwapExecution:
    def test_projection(self, quote: Quote) -> None:
        executed_at = NOW + datetime.timedelta(seconds=5)
        confirmed = quote.model_copy(
            update={"state": QuoteState.CONFIRMED, "executed_at": executed_at}
        )
        execution = SwapExecution.from_quote(confirmed)
        assert execution.id == 3
        assert execution.executed_at == executed_at

    def test_unconfirmed_quote_rejected(self, quote: Quote) -> None:
        with pytest.raises(ValueError, match="not confirmed"):
            SwapExecution.from_quote(quote)
