"""Exception handlers and request logging middleware.

Maps domain exceptions from ``Swapper.utils.exceptions`` to HTTP status codes.
Every error body carries the exception message as ``detail`` and its stable
``kind`` so clients can branch without parsing text.
"""

import logging
import time

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from Swapper.utils.exceptions import (
    NotConfirmableError,
    ProviderExecutionError,
    ProviderUnavailableError,
    QuoteNotFoundError,
    SwapperError,
    UnderLiquidityError,
)

logger = logging.getLogger(__name__)


def _error_response(status_code: int, exc: SwapperError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc), "kind": exc.kind})


# ---------------------------------------------------------------------------
# Domain exception -> HTTP status handlers
# ---------------------------------------------------------------------------


async def _under_liquidity_handler(request: Request, exc: UnderLiquidityError) -> JSONResponse:
    """Map UnderLiquidityError to HTTP 422."""
    logger.warning(
        "Under-liquidity: %s %s %s (filled %s)", exc.side, exc.volume, exc.pair, exc.filled
    )
    return _error_response(422, exc)


async def _quote_not_found_handler(request: Request, exc: QuoteNotFoundError) -> JSONResponse:
    """Map QuoteNotFoundError to HTTP 404."""
    logger.warning("Quote not found: %s", exc)
    return _error_response(404, exc)


async def _not_confirmable_handler(request: Request, exc: NotConfirmableError) -> JSONResponse:
    """Map NotConfirmableError to HTTP 409."""
    logger.warning("Quote not confirmable (%s): %s", exc.reason, exc)
    return _error_response(409, exc)


async def _provider_execution_handler(
    request: Request, exc: ProviderExecutionError
) -> JSONResponse:
    """Map ProviderExecutionError to HTTP 502, passing the provider message through."""
    logger.error("Provider execution failed: %s", exc)
    return _error_response(502, exc)


async def _provider_unavailable_handler(
    request: Request, exc: ProviderUnavailableError
) -> JSONResponse:
    """Map ProviderUnavailableError to HTTP 503."""
    logger.error("Provider unavailable: %s", exc)
    return _error_response(503, exc)


async def _swapper_error_handler(request: Request, exc: SwapperError) -> JSONResponse:
    """Map any other SwapperError to HTTP 500."""
    logger.error("Unhandled swapper error: %s", exc)
    return _error_response(500, exc)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all domain exception handlers on the FastAPI application.

    More specific exception types must be registered before their base classes
    so FastAPI matches them correctly.
    """
    app.add_exception_handler(UnderLiquidityError, _under_liquidity_handler)  # type: ignore[arg-type]
    app.add_exception_handler(QuoteNotFoundError, _quote_not_found_handler)  # type: ignore[arg-type]
    app.add_exception_handler(NotConfirmableError, _not_confirmable_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ProviderExecutionError, _provider_execution_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ProviderUnavailableError, _provider_unavailable_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SwapperError, _swapper_error_handler)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with method, path, status code, and duration."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Process request, log timing information, and return response."""
        start_time = time.monotonic()
        response = await call_next(request)
        duration_ms = (time.monotonic() - start_time) * 1000

        logger.info(
            "%s %s -> %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )

        return response
