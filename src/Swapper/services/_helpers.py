"""Shared helpers for the exchange client.

Holds the retry-with-backoff pattern applied to idempotent reads.
Order placement is never routed through it.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any, Final, TypeVar

import httpx

from Swapper.utils.exceptions import ProviderUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Shared constants
# ---------------------------------------------------------------------------

MAX_RETRIES: Final[int] = 3
BACKOFF_DELAYS: Final[list[float]] = [0.25, 0.5, 1.0]

# Network failures and 5xx answers; anything else is not worth repeating
RETRYABLE_ERRORS: Final[tuple[type[Exception], ...]] = (
    TimeoutError,
    httpx.TransportError,
    httpx.HTTPStatusError,
)


# ---------------------------------------------------------------------------
# Retry wrapper
# ---------------------------------------------------------------------------


def _delay_before(attempt: int, delays: list[float]) -> float:
    """Backoff to wait after failed *attempt* (0-based); the last delay repeats."""
    return delays[min(attempt, len(delays) - 1)] if delays else 0.0


async def fetch_with_retry(
    fetch_fn: Callable[[], Coroutine[Any, Any, T]],
    *,
    source: str,
    label: str,
    max_retries: int = MAX_RETRIES,
    backoff_delays: list[float] | None = None,
) -> T:
    """Await *fetch_fn* until it succeeds or *max_retries* attempts have failed.

    Only ``RETRYABLE_ERRORS`` trigger another attempt. Any other exception,
    including ``ProviderUnavailableError`` raised for a definitive provider
    answer, propagates from the attempt that raised it.

    Args:
        fetch_fn: Zero-argument callable returning a coroutine.
        source: Provider name for error context.
        label: Human-readable label for log messages.
        max_retries: Maximum number of attempts (default 3).
        backoff_delays: Delay schedule in seconds (default [0.25, 0.5, 1.0]).

    Raises:
        ProviderUnavailableError: Once every attempt has failed with a
            retryable error. The last error is chained as ``__cause__``.
    """
    delays = BACKOFF_DELAYS if backoff_delays is None else backoff_delays
    errors: list[Exception] = []

    for attempt in range(1, max_retries + 1):
        try:
            return await fetch_fn()
        except RETRYABLE_ERRORS as exc:
            errors.append(exc)
            logger.warning(
                "%s from %s failed (attempt %d/%d): %s",
                label,
                source,
                attempt,
                max_retries,
                exc or type(exc).__name__,
            )
        if attempt < max_retries:
            await asyncio.sleep(_delay_before(attempt - 1, delays))

    last = errors[-1]
    raise ProviderUnavailableError(
        f"Failed to fetch {label} after {max_retries} retries: {last or type(last).__name__}",
        source=source,
    ) from last
