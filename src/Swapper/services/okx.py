"""OKX REST gateway: order book snapshots and fill-or-kill order placement.

Every request is signed the way OKX v5 expects: base64(HMAC-SHA256) over
``timestamp + METHOD + requestPath + body`` with the account secret. The query
string is part of ``requestPath``, so GET requests are sent with exactly the
path that was signed.

Order book fetches are retried with backoff. Order placement is sent once;
whatever the exchange answers is returned to the caller verbatim.
"""

from __future__ import annotations

import base64
import datetime
import hashlib
import hmac
import json
import logging
from decimal import Decimal
from typing import Any, Final

import httpx

from Swapper.config import Settings
from Swapper.models.enums import Side
from Swapper.models.order_book import OrderBookSnapshot, PriceLevel
from Swapper.services._helpers import fetch_with_retry
from Swapper.utils.exceptions import ProviderExecutionError, ProviderUnavailableError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

OKX_SOURCE: Final[str] = "okx"
BOOKS_PATH: Final[str] = "/api/v5/market/books"
ORDER_PATH: Final[str] = "/api/v5/trade/order"

# OKX answers code "0" on success
OKX_SUCCESS_CODE: Final[str] = "0"

# Spot orders settle from the cash balance and either fill entirely or cancel
TRADE_MODE: Final[str] = "cash"
ORDER_TYPE: Final[str] = "fok"


class OkxGateway:
    """Async OKX client implementing the ``ExchangeGateway`` protocol.

    Usage::

        gateway = OkxGateway.from_settings(Settings.from_env())
        book = await gateway.fetch_order_book("BTC-USDT")
        order_id = await gateway.execute("BTC-USDT", Side.BUY, Decimal("0.5"), Decimal("37447.77"))
        await gateway.aclose()
    """

    def __init__(
        self,
        *,
        base_url: str,
        access_key: str,
        secret_key: str,
        passphrase: str,
        simulated_trading: bool = True,
        book_depth: int = 200,
        client: httpx.AsyncClient | None = None,
        backoff_delays: list[float] | None = None,
    ) -> None:
        self._secret_key = secret_key
        self._book_depth = book_depth
        self._backoff_delays = backoff_delays
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(connect=5.0, read=10.0, write=10.0, pool=5.0),
            limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
        )
        self._client.headers.update(
            {
                "OK-ACCESS-KEY": access_key,
                "OK-ACCESS-PASSPHRASE": passphrase,
                "x-simulated-trading": "1" if simulated_trading else "0",
            }
        )

        logger.info(
            "OkxGateway initialized: base_url=%s, simulated=%s, credentials=%s",
            base_url,
            simulated_trading,
            "configured" if access_key else "not configured",
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> OkxGateway:
        """Build a gateway from application settings."""
        return cls(
            base_url=settings.okx_base_url,
            access_key=settings.okx_access_key,
            secret_key=settings.okx_secret_key,
            passphrase=settings.okx_passphrase,
            simulated_trading=settings.okx_simulated_trading,
            book_depth=settings.order_book_depth,
        )

    async def aclose(self) -> None:
        """Close the shared httpx client."""
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch_order_book(self, pair: str) -> OrderBookSnapshot:
        """Fetch up to ``book_depth`` levels per side for *pair*.

        Raises:
            ProviderUnavailableError: If OKX is unreachable after retries or
                answers with an error.
        """
        payload = await fetch_with_retry(
            lambda: self._fetch_raw_books(pair),
            source=OKX_SOURCE,
            label=f"OrderBook({pair})",
            backoff_delays=self._backoff_delays,
        )
        snapshot = _payload_to_snapshot(pair, payload)
        logger.info(
            "Fetched order book for %s: %d asks, %d bids",
            pair,
            len(snapshot.asks),
            len(snapshot.bids),
        )
        return snapshot

    async def execute(self, pair: str, side: Side, volume: Decimal, price: Decimal) -> str:
        """Place a fill-or-kill limit order at *price* and return its order id.

        Raises:
            ProviderExecutionError: With OKX's own message when the order is
                rejected or the request fails.
        """
        body = json.dumps(
            {
                "instId": pair,
                "tdMode": TRADE_MODE,
                "side": side.value,
                "ordType": ORDER_TYPE,
                "px": str(price),
                "sz": str(volume),
            },
            separators=(",", ":"),
        )
        try:
            response = await self._client.post(
                ORDER_PATH,
                content=body,
                headers={
                    **self._signed_headers("POST", ORDER_PATH, body),
                    "Content-Type": "application/json",
                },
            )
            payload: dict[str, Any] = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Order placement for %s failed: %s", pair, exc)
            raise ProviderExecutionError(str(exc), source=OKX_SOURCE) from exc

        order: dict[str, Any] = (payload.get("data") or [{}])[0]
        accepted = (
            payload.get("code") == OKX_SUCCESS_CODE
            and order.get("sCode", OKX_SUCCESS_CODE) == OKX_SUCCESS_CODE
        )
        if not accepted:
            message = (
                order.get("sMsg")
                or payload.get("msg")
                or f"OKX returned HTTP {response.status_code}"
            )
            logger.warning("OKX rejected %s %s %s @ %s: %s", side, volume, pair, price, message)
            raise ProviderExecutionError(
                message,
                source=OKX_SOURCE,
                http_status=response.status_code,
            )

        raw_id = order.get("ordId")
        if not raw_id:
            message = f"OKX accepted the {pair} order without an order id"
            logger.error("%s: %s", message, payload)
            raise ProviderExecutionError(
                message,
                source=OKX_SOURCE,
                http_status=response.status_code,
            )
        order_id = str(raw_id)
        logger.info("OKX order %s placed: %s %s %s @ %s", order_id, side, volume, pair, price)
        return order_id

    # ------------------------------------------------------------------
    # Request signing
    # ------------------------------------------------------------------

    def sign(self, timestamp: str, method: str, request_path: str, body: str = "") -> str:
        """Return the OK-ACCESS-SIGN value for one request."""
        prehash = f"{timestamp}{method.upper()}{request_path}{body}"
        digest = hmac.new(
            self._secret_key.encode("utf-8"),
            prehash.encode("utf-8"),
            hashlib.sha256,
        ).digest()
        return base64.b64encode(digest).decode("ascii")

    def _signed_headers(self, method: str, request_path: str, body: str = "") -> dict[str, str]:
        timestamp = _okx_timestamp(datetime.datetime.now(datetime.UTC))
        return {
            "OK-ACCESS-TIMESTAMP": timestamp,
            "OK-ACCESS-SIGN": self.sign(timestamp, method, request_path, body),
        }

    # ------------------------------------------------------------------
    # Raw fetches
    # ------------------------------------------------------------------

    async def _fetch_raw_books(self, pair: str) -> dict[str, Any]:
        """GET the books endpoint once; 5xx and transport errors propagate for retry."""
        query = httpx.QueryParams({"instId": pair, "sz": str(self._book_depth)})
        request_path = f"{BOOKS_PATH}?{query}"
        response = await self._client.get(
            request_path,
            headers=self._signed_headers("GET", request_path),
        )

        if response.status_code >= 500:  # noqa: PLR2004
            response.raise_for_status()

        if response.status_code != 200:  # noqa: PLR2004
            msg = f"OKX returned HTTP {response.status_code} for {pair} order book."
            raise ProviderUnavailableError(
                msg,
                source=OKX_SOURCE,
                http_status=response.status_code,
            )

        try:
            payload: dict[str, Any] = response.json()
        except ValueError as exc:
            msg = f"OKX returned a non-JSON order book for {pair}."
            raise ProviderUnavailableError(msg, source=OKX_SOURCE, http_status=200) from exc
        if payload.get("code") != OKX_SUCCESS_CODE or not payload.get("data"):
            msg = f"OKX order book error for {pair}: {payload.get('msg') or 'empty response'}"
            raise ProviderUnavailableError(msg, source=OKX_SOURCE, http_status=200)
        return payload


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


def _okx_timestamp(now: datetime.datetime) -> str:
    """ISO-8601 UTC with millisecond precision and a trailing Z."""
    return now.astimezone(datetime.UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _payload_to_snapshot(pair: str, payload: dict[str, Any]) -> OrderBookSnapshot:
    """Convert an OKX books response into an OrderBookSnapshot."""
    book = payload["data"][0]
    try:
        return OrderBookSnapshot(
            pair=pair,
            asks=tuple(PriceLevel.from_row(row) for row in book["asks"]),
            bids=tuple(PriceLevel.from_row(row) for row in book["bids"]),
            observed_at=datetime.datetime.fromtimestamp(int(book["ts"]) / 1000, tz=datetime.UTC),
        )
    except (KeyError, TypeError, ValueError, ArithmeticError) as exc:
        msg = f"Malformed OKX order book for {pair}: {exc}"
        raise ProviderUnavailableError(msg, source=OKX_SOURCE) from exc
