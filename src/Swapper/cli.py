"""CLI entry point for Swapper.

Provides the ``swapper`` command with subcommands for serving the HTTP API,
pricing a quote, confirming it, and listing recent quotes.

This is the ONLY module where console output is allowed. All other modules use
``logging``. Async internals are bridged to typer's synchronous interface via
``asyncio.run()``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from decimal import Decimal, InvalidOperation
from typing import Annotated

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from Swapper.config import Settings
from Swapper.data.database import Database
from Swapper.data.repository import QuoteRepository
from Swapper.logging_config import configure_logging
from Swapper.models.enums import Side
from Swapper.models.quote import Quote
from Swapper.services.okx import OkxGateway
from Swapper.services.quote_service import QuoteService
from Swapper.utils.exceptions import SwapperError

app = typer.Typer(name="swapper", help="Order-book priced currency swaps")

console = Console()


# ---------------------------------------------------------------------------
# serve command
# ---------------------------------------------------------------------------


@app.command()
def serve(
    host: Annotated[str, typer.Option(help="Interface to bind")] = "127.0.0.1",
    port: Annotated[int, typer.Option(help="Port to listen on")] = 8000,
) -> None:
    """Run the HTTP API."""
    uvicorn.run("Swapper.web.app:create_app", factory=True, host=host, port=port)


# ---------------------------------------------------------------------------
# quote / confirm / history commands
# ---------------------------------------------------------------------------


@app.command()
def quote(
    pair: Annotated[str, typer.Argument(help="Instrument id, e.g. BTC-USDT")],
    side: Annotated[Side, typer.Argument(help="buy or sell")],
    volume: Annotated[str, typer.Argument(help="Requested volume, e.g. 1000")],
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Price a swap against the live order book and store the offer."""
    configure_logging(verbose=verbose)
    try:
        amount = Decimal(volume)
    except InvalidOperation:
        console.print(f"[red]Invalid volume:[/red] {volume}")
        raise typer.Exit(code=2) from None
    if not amount.is_finite() or amount <= 0:
        console.print(f"[red]Volume must be a positive number:[/red] {volume}")
        raise typer.Exit(code=2)
    asyncio.run(_run(lambda service: service.create_quote(pair.upper(), side, amount)))


@app.command()
def confirm(
    quote_id: Annotated[int, typer.Argument(help="Id returned by the quote command")],
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Execute a previously priced swap while its offer is still valid."""
    configure_logging(verbose=verbose)
    asyncio.run(_run(lambda service: service.confirm_quote(quote_id)))


@app.command()
def history(
    limit: Annotated[int, typer.Option(help="Number of quotes to show")] = 20,
) -> None:
    """List the most recent quotes and their states."""
    configure_logging(quiet=True)
    asyncio.run(_history_async(limit=limit))


# ---------------------------------------------------------------------------
# Async bodies
# ---------------------------------------------------------------------------


async def _run(operation: Callable[[QuoteService], Awaitable[Quote]]) -> None:
    """Build the service stack, run *operation* against it, and render the result."""
    settings = _load_settings()
    gateway = OkxGateway.from_settings(settings)
    try:
        async with Database(settings.database_path) as db:
            service = QuoteService(gateway=gateway, store=QuoteRepository(db), settings=settings)
            try:
                result = await operation(service)
            except SwapperError as exc:
                console.print(f"[red]{exc.kind}:[/red] {exc}")
                raise typer.Exit(code=1) from exc
    finally:
        await gateway.aclose()
    _render_quotes([result], title=f"Swap {result.id}")


async def _history_async(*, limit: int) -> None:
    settings = _load_settings()
    async with Database(settings.database_path) as db:
        quotes = await QuoteRepository(db).list_recent(limit=limit)
    if not quotes:
        console.print("No swaps recorded yet.")
        return
    _render_quotes(quotes, title="Recent swaps")


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except SwapperError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=2) from exc


def _render_quotes(quotes: list[Quote], *, title: str) -> None:
    table = Table(title=title)
    table.add_column("ID", justify="right")
    table.add_column("Pair")
    table.add_column("Side")
    table.add_column("Volume", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("State")
    table.add_column("Expires")
    for q in quotes:
        table.add_row(
            str(q.id),
            q.pair,
            q.side.value,
            str(q.volume),
            str(q.offered_price) if q.offered_price is not None else "-",
            q.state.value,
            q.expires_at.isoformat() if q.expires_at else "-",
        )
    console.print(table)
