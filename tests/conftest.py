"""Shared test fixtures for the Swapper test suite.

Provides realistic order book snapshots, settings, a controllable clock, and
mocked gateway/store collaborators so tests don't need to inline large
construction blocks.
"""

import datetime
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from Swapper.config import Settings
from Swapper.models import OrderBookSnapshot, PriceLevel, Quote, QuoteState, Side

NOW = datetime.datetime(2025, 1, 15, 15, 30, 0, tzinfo=datetime.UTC)


class FrozenClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, now: datetime.datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += datetime.timedelta(**kwargs)


def level(price: str, size: str, liquidated: str = "0", multiplier: str = "1") -> PriceLevel:
    """Build a PriceLevel from exchange-style strings."""
    return PriceLevel.from_row([price, size, liquidated, multiplier])


def book(
    asks: list[PriceLevel],
    bids: list[PriceLevel] | None = None,
    pair: str = "BTC-USDT",
) -> OrderBookSnapshot:
    """Build a snapshot observed at NOW."""
    return OrderBookSnapshot(pair=pair, asks=tuple(asks), bids=tuple(bids or []), observed_at=NOW)


@pytest.fixture()
def deep_book() -> OrderBookSnapshot:
    """Single deep level per side: BTC-USDT ask 36713.5 x 15169, bid 36687 x 17171."""
    return book(
        asks=[level("36713.5", "15169")],
        bids=[level("36687", "17171")],
    )


@pytest.fixture()
def thin_book() -> OrderBookSnapshot:
    """Single shallow level per side: capacity 15 on the ask, 17 on the bid."""
    return book(
        asks=[level("36713.5", "15")],
        bids=[level("36687", "17")],
    )


@pytest.fixture()
def laddered_book() -> OrderBookSnapshot:
    """Three ask and three bid levels in exchange priority order."""
    return book(
        asks=[
            level("100.00", "10"),
            level("101.00", "20", liquidated="5"),
            level("102.50", "50"),
        ],
        bids=[
            level("99.00", "10"),
            level("98.00", "10", multiplier="2"),
            level("97.00", "100"),
        ],
    )


@pytest.fixture()
def settings() -> Settings:
    """Settings with the production default fees (2% each way) and 30s validity."""
    return Settings(fee_buy=Decimal("2"), fee_sell=Decimal("2"), offer_time_ms=30_000)


@pytest.fixture()
def clock() -> FrozenClock:
    """A clock frozen at NOW."""
    return FrozenClock()


@pytest.fixture()
def gateway(deep_book: OrderBookSnapshot) -> AsyncMock:
    """Exchange gateway double serving deep_book and accepting every order."""
    mock = AsyncMock()
    mock.fetch_order_book = AsyncMock(return_value=deep_book)
    mock.execute = AsyncMock(return_value="312269865356374016")
    return mock


@pytest.fixture()
def store() -> AsyncMock:
    """Quote store double: assigns id 1 on first save, echoes updates, grants every claim."""

    def _save(quote: Quote) -> Quote:
        return quote if quote.id is not None else quote.model_copy(update={"id": 1})

    mock = AsyncMock()
    mock.save = AsyncMock(side_effect=_save)
    mock.find_by_id = AsyncMock(return_value=None)
    mock.claim = AsyncMock(return_value=True)
    return mock


@pytest.fixture()
def open_quote() -> Quote:
    """A persisted Open buy quote priced at NOW."""
    return Quote(
        id=7,
        pair="BTC-USDT",
        side=Side.BUY,
        volume=Decimal("1000"),
        provider_price=Decimal("36713.50"),
        offered_price=Decimal("37447.77"),
        created_at=NOW,
        expires_at=NOW + datetime.timedelta(seconds=30),
        state=QuoteState.OPEN,
    )
