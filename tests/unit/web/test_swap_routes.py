"""Tests for the swap HTTP routes and their error mapping."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from Swapper.models import OrderBookSnapshot, Quote, QuoteState
from Swapper.utils.exceptions import ProviderExecutionError, ProviderUnavailableError

INSUFFICIENT_BALANCE = "Order placement failed due to insufficient balance"


class TestStatus:
    def test_plain_text_liveness(self, client: TestClient) -> None:
        response = client.get("/status")
        assert response.status_code == 200
        assert response.text == "Swapper is alive"
        assert response.headers["content-type"].startswith("text/plain")

    def test_health(self, client: TestClient) -> None:
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestCreateSwapOrder:
    def test_buy_offer(self, client: TestClient) -> None:
        response = client.post(
            "/createSwapOrder", json={"pair": "BTC-USDT", "side": "buy", "volume": "1000"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == 1
        assert data["offered_price"] == "37447.77"
        assert data["side"] == "buy"
        assert data["volume"] == "1000"
        assert data["created_at"].startswith("2025-01-15T15:30:00")
        assert data["expires_at"].startswith("2025-01-15T15:30:30")

    def test_provider_price_not_exposed(self, client: TestClient) -> None:
        response = client.post(
            "/createSwapOrder", json={"pair": "BTC-USDT", "side": "sell", "volume": "1000"}
        )
        data = response.json()
        assert data["offered_price"] == "35953.26"
        assert "provider_price" not in data

    def test_under_liquidity_is_422(
        self, client: TestClient, gateway: AsyncMock, thin_book: OrderBookSnapshot
    ) -> None:
        gateway.fetch_order_book.return_value = thin_book

        response = client.post(
            "/createSwapOrder", json={"pair": "BTC-USDT", "side": "buy", "volume": "1000"}
        )

        assert response.status_code == 422
        assert response.json() == {
            "detail": "Not enough orders to fulfill the swap",
            "kind": "under_liquidity",
        }

    def test_provider_down_is_503(self, client: TestClient, gateway: AsyncMock) -> None:
        gateway.fetch_order_book.side_effect = ProviderUnavailableError(
            "Failed to fetch OrderBook(BTC-USDT) after 3 retries", source="okx"
        )

        response = client.post(
            "/createSwapOrder", json={"pair": "BTC-USDT", "side": "buy", "volume": "1"}
        )

        assert response.status_code == 503
        assert response.json()["kind"] == "provider_unavailable"

    @pytest.mark.parametrize(
        "body",
        [
            {"pair": "BTC-USDT", "side": "buy", "volume": "0"},
            {"pair": "BTC-USDT", "side": "buy", "volume": "-5"},
            {"pair": "BTC-USDT", "side": "hold", "volume": "1"},
            {"pair": "BTC", "side": "buy", "volume": "1"},
            {"pair": "BTC-USDT", "side": "buy"},
        ],
    )
    def test_invalid_body_rejected(
        self, client: TestClient, gateway: AsyncMock, body: dict
    ) -> None:
        response = client.post("/createSwapOrder", json=body)

        assert response.status_code == 422
        gateway.fetch_order_book.assert_not_awaited()


class TestConfirmSwapOrder:
    def test_confirmed(
        self, client: TestClient, store: AsyncMock, open_quote: Quote, clock
    ) -> None:
        store.find_by_id.return_value = open_quote
        clock.advance(seconds=10)

        response = client.post("/confirmSwapOrder", json={"swapId": 7})

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == 7
        assert data["offered_price"] == "37447.77"
        assert data["executed_at"].startswith("2025-01-15T15:30:10")

    def test_unknown_id_is_404(self, client: TestClient) -> None:
        response = client.post("/confirmSwapOrder", json={"swapId": 999})

        assert response.status_code == 404
        assert response.json() == {"detail": "No swap found with id 999", "kind": "not_found"}

    def test_expired_is_409(
        self, client: TestClient, store: AsyncMock, open_quote: Quote, clock
    ) -> None:
        store.find_by_id.return_value = open_quote
        clock.advance(seconds=30)

        response = client.post("/confirmSwapOrder", json={"swapId": 7})

        assert response.status_code == 409
        assert response.json()["kind"] == "not_confirmable"
        assert store.save.await_args.args[0].state == QuoteState.EXPIRED

    def test_already_confirmed_is_409(
        self, client: TestClient, store: AsyncMock, open_quote: Quote
    ) -> None:
        store.find_by_id.return_value = open_quote.model_copy(
            update={"state": QuoteState.CONFIRMED}
        )

        response = client.post("/confirmSwapOrder", json={"swapId": 7})

        assert response.status_code == 409

    def test_provider_rejection_is_502_with_message(
        self, client: TestClient, gateway: AsyncMock, store: AsyncMock, open_quote: Quote
    ) -> None:
        store.find_by_id.return_value = open_quote
        gateway.execute.side_effect = ProviderExecutionError(INSUFFICIENT_BALANCE, source="okx")

        response = client.post("/confirmSwapOrder", json={"swapId": 7})

        assert response.status_code == 502
        assert response.json() == {
            "detail": INSUFFICIENT_BALANCE,
            "kind": "provider_execution_failed",
        }

    def test_missing_swap_id_is_422(self, client: TestClient) -> None:
        response = client.post("/confirmSwapOrder", json={})
        assert response.status_code == 422
