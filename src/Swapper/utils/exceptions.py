"""Custom exception hierarchy for the Swapper application.

Every quoting and confirmation failure inherits from SwapperError, which
carries a stable ``kind`` string so the HTTP layer and the CLI can tell the
failures apart without parsing messages.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from Swapper.models.enums import NotConfirmableReason, Side
    from Swapper.models.quote import Quote


class SwapperError(Exception):
    """Base exception for all quote pricing and execution failures."""

    kind: ClassVar[str] = "swapper_error"


class UnderLiquidityError(SwapperError):
    """Raised when the order book is too shallow to fill the requested volume.

    Attributes:
        pair: Instrument that was priced.
        side: Side of the requested swap.
        volume: Volume the caller asked for.
        filled: Volume the book could supply before running out.
    """

    kind: ClassVar[str] = "under_liquidity"

    def __init__(
        self,
        message: str,
        *,
        pair: str,
        side: Side,
        volume: Decimal,
        filled: Decimal,
    ) -> None:
        self.pair = pair
        self.side = side
        self.volume = volume
        self.filled = filled
        super().__init__(message)

    @property
    def shortfall(self) -> Decimal:
        """Volume that could not be covered by the book."""
        return self.volume - self.filled


class QuoteNotFoundError(SwapperError):
    """Raised when a quote identifier does not exist in the store."""

    kind: ClassVar[str] = "not_found"

    def __init__(self, quote_id: int) -> None:
        self.quote_id = quote_id
        super().__init__(f"No swap found with id {quote_id}")


class NotConfirmableError(SwapperError):
    """Raised when a stored quote is expired or not in the Open state.

    Attributes:
        quote_id: Identifier of the rejected quote.
        reason: Why the confirmation was refused.
    """

    kind: ClassVar[str] = "not_confirmable"

    def __init__(
        self,
        message: str,
        *,
        quote_id: int | None,
        reason: NotConfirmableReason,
    ) -> None:
        self.quote_id = quote_id
        self.reason = reason
        super().__init__(message)


class ProviderError(SwapperError):
    """Base class for failures reported by the exchange provider.

    Attributes:
        source: Provider name (e.g. ``"okx"``).
        http_status: The HTTP status code, if the failure was HTTP-related.
    """

    kind: ClassVar[str] = "provider_error"

    def __init__(
        self,
        message: str,
        *,
        source: str,
        http_status: int | None = None,
    ) -> None:
        self.source = source
        self.http_status = http_status
        super().__init__(message)


class ProviderUnavailableError(ProviderError):
    """Raised when the order book cannot be fetched from the provider."""

    kind: ClassVar[str] = "provider_unavailable"


class ProviderExecutionError(ProviderError):
    """Raised when the provider rejects an order.

    The message is the provider's own text, unmodified. ``quote`` is set by
    the lifecycle controller to the ConfirmFailed copy of the quote.
    """

    kind: ClassVar[str] = "provider_execution_failed"

    def __init__(
        self,
        message: str,
        *,
        source: str,
        http_status: int | None = None,
        quote: Quote | None = None,
    ) -> None:
        self.quote = quote
        super().__init__(message, source=source, http_status=http_status)


class ConfigurationError(SwapperError):
    """Raised at startup when a setting is missing or out of range."""

    kind: ClassVar[str] = "configuration_error"

    def __init__(self, message: str, *, setting: str) -> None:
        self.setting = setting
        super().__init__(message)
