"""Process configuration loaded from environment variables.

Settings are read once at startup, validated, and then shared read-only by
every request. Any malformed or out-of-range value raises ConfigurationError
so the process refuses to start instead of quoting with a broken fee table.
"""

from __future__ import annotations

import datetime
import logging
import os
from collections.abc import Mapping
from decimal import Decimal
from typing import Final

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from Swapper.pricing.fees import FeeSchedule
from Swapper.utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Environment variable -> Settings field
ENV_VARS: Final[dict[str, str]] = {
    "SWAPPER_FEE_BUY": "fee_buy",
    "SWAPPER_FEE_SELL": "fee_sell",
    "SWAPPER_OFFER_TIME_MS": "offer_time_ms",
    "SWAPPER_PRICE_DECIMALS": "price_decimals",
    "SWAPPER_DB_PATH": "database_path",
    "OKX_BASE_URL": "okx_base_url",
    "OKX_ACCESS_KEY": "okx_access_key",
    "OKX_SECRET_KEY": "okx_secret_key",
    "OKX_PASSPHRASE": "okx_passphrase",
    "OKX_SIMULATED_TRADING": "okx_simulated_trading",
    "OKX_BOOK_DEPTH": "order_book_depth",
}

# OKX serves at most 400 levels per side on /api/v5/market/books
MAX_ORDER_BOOK_DEPTH: Final[int] = 400


class Settings(BaseModel):
    """Application configuration.

    Usage::

        settings = Settings.from_env()
        fee = settings.fees.percent_for(Side.BUY)
    """

    model_config = ConfigDict(frozen=True)

    # Swap pricing
    fee_buy: Decimal = Decimal("2")
    fee_sell: Decimal = Decimal("2")
    offer_time_ms: int = 30_000
    price_decimals: int = 2

    # Persistence
    database_path: str = "data/swapper.db"

    # Exchange
    okx_base_url: str = "https://www.okx.com"
    okx_access_key: str = ""
    okx_secret_key: str = ""
    okx_passphrase: str = ""
    okx_simulated_trading: bool = True
    order_book_depth: int = 200

    @model_validator(mode="after")
    def check_ranges(self) -> Settings:
        """Reject values that would make quoting meaningless."""
        for setting, fee in (("fee_buy", self.fee_buy), ("fee_sell", self.fee_sell)):
            if not Decimal("0") <= fee < Decimal("100"):
                msg = f"{setting} must be in [0, 100), got {fee}"
                raise ConfigurationError(msg, setting=setting)
        if self.offer_time_ms <= 0:
            msg = f"offer_time_ms must be positive, got {self.offer_time_ms}"
            raise ConfigurationError(msg, setting="offer_time_ms")
        if self.price_decimals < 0:
            msg = f"price_decimals must not be negative, got {self.price_decimals}"
            raise ConfigurationError(msg, setting="price_decimals")
        if not 1 <= self.order_book_depth <= MAX_ORDER_BOOK_DEPTH:
            msg = (
                f"order_book_depth must be between 1 and {MAX_ORDER_BOOK_DEPTH}, "
                f"got {self.order_book_depth}"
            )
            raise ConfigurationError(msg, setting="order_book_depth")
        return self

    @property
    def fees(self) -> FeeSchedule:
        """Fee percentages keyed by side."""
        return FeeSchedule(buy=self.fee_buy, sell=self.fee_sell)

    @property
    def validity_window(self) -> datetime.timedelta:
        """How long a quote stays confirmable after it is priced."""
        return datetime.timedelta(milliseconds=self.offer_time_ms)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables, falling back to defaults.

        Args:
            environ: Mapping to read from (default ``os.environ``).

        Raises:
            ConfigurationError: If a value cannot be parsed or is out of range.
        """
        source = os.environ if environ is None else environ
        values = {field: source[var] for var, field in ENV_VARS.items() if var in source}
        try:
            settings = cls.model_validate(values)
        except ValidationError as exc:
            error = exc.errors()[0]
            setting = str(error["loc"][0]) if error["loc"] else "settings"
            msg = f"Invalid value for {setting}: {error['msg']}"
            raise ConfigurationError(msg, setting=setting) from exc

        logger.info(
            "Settings loaded: fee_buy=%s, fee_sell=%s, offer_time_ms=%d, okx_credentials=%s",
            settings.fee_buy,
            settings.fee_sell,
            settings.offer_time_ms,
            "configured" if settings.okx_access_key else "not configured",
        )
        return settings
