"""Quote store backed by the ``swaps`` table.

All queries use parameterized SQL (no string interpolation). Decimal fields are
written with ``str()`` and read back with ``Decimal()`` so prices never pass
through a float.
"""

import datetime
import logging
from decimal import Decimal

import aiosqlite

from Swapper.data.database import Database
from Swapper.models.enums import QuoteState, Side
from Swapper.models.quote import Quote

logger = logging.getLogger(__name__)

_SELECT_COLUMNS = (
    "SELECT id, pair, side, volume, provider_price, offered_price, created_at, "
    "expires_at, state, executed_at, execution_id, failure_reason FROM swaps"
)


class QuoteRepository:
    """Persist and retrieve swap quotes by identifier.

    The store assigns the identifier on first save; later saves of the same
    quote update its row in place.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    async def save(self, quote: Quote) -> Quote:
        """Insert a new quote or update an existing one.

        Returns:
            The quote as stored, with ``id`` populated.
        """
        conn = self._db.connection
        if quote.id is None:
            cursor = await conn.execute(
                "INSERT INTO swaps "
                "(pair, side, volume, provider_price, offered_price, created_at, "
                "expires_at, state, executed_at, execution_id, failure_reason) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                _quote_params(quote),
            )
            await conn.commit()
            quote_id = cursor.lastrowid
            if quote_id is None:
                msg = "SQLite did not return a row id for the inserted swap."
                raise RuntimeError(msg)
            logger.info("Swap %d saved: %s %s %s", quote_id, quote.side, quote.volume, quote.pair)
            return quote.model_copy(update={"id": quote_id})

        await conn.execute(
            "UPDATE swaps SET pair = ?, side = ?, volume = ?, provider_price = ?, "
            "offered_price = ?, created_at = ?, expires_at = ?, state = ?, "
            "executed_at = ?, execution_id = ?, failure_reason = ? WHERE id = ?",
            (*_quote_params(quote), quote.id),
        )
        await conn.commit()
        logger.debug("Swap %d updated: state=%s", quote.id, quote.state)
        return quote

    async def find_by_id(self, quote_id: int) -> Quote | None:
        """Return the quote with *quote_id*, or None if not found."""
        conn = self._db.connection
        cursor = await conn.execute(f"{_SELECT_COLUMNS} WHERE id = ?", (quote_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return _row_to_quote(row)

    async def claim(self, quote_id: int) -> bool:
        """Atomically move quote *quote_id* from Open to Confirming.

        Returns:
            True if this call made the transition, False if the quote was
            missing or no longer Open.
        """
        conn = self._db.connection
        cursor = await conn.execute(
            "UPDATE swaps SET state = ? WHERE id = ? AND state = ?",
            (QuoteState.CONFIRMING.value, quote_id, QuoteState.OPEN.value),
        )
        await conn.commit()
        claimed = cursor.rowcount == 1
        logger.debug("Swap %d claim for confirmation: %s", quote_id, claimed)
        return claimed

    async def list_recent(self, *, limit: int = 20) -> list[Quote]:
        """Return the most recently created quotes, newest first."""
        conn = self._db.connection
        cursor = await conn.execute(f"{_SELECT_COLUMNS} ORDER BY id DESC LIMIT ?", (limit,))
        rows = await cursor.fetchall()
        return [_row_to_quote(row) for row in rows]


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


def _quote_params(quote: Quote) -> tuple[str | None, ...]:
    """Column values for a quote, in insert order."""
    return (
        quote.pair,
        quote.side.value,
        str(quote.volume),
        _decimal_to_text(quote.provider_price),
        _decimal_to_text(quote.offered_price),
        _datetime_to_text(quote.created_at),
        _datetime_to_text(quote.expires_at),
        quote.state.value,
        _datetime_to_text(quote.executed_at),
        quote.execution_id,
        quote.failure_reason,
    )


def _decimal_to_text(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def _datetime_to_text(value: datetime.datetime | None) -> str | None:
    return None if value is None else value.isoformat()


def _text_to_datetime(value: str | None) -> datetime.datetime | None:
    return None if value is None else datetime.datetime.fromisoformat(value)


def _text_to_decimal(value: str | None) -> Decimal | None:
    return None if value is None else Decimal(value)


def _row_to_quote(row: aiosqlite.Row) -> Quote:
    """Convert a ``swaps`` row to a Quote model."""
    return Quote(
        id=row["id"],
        pair=row["pair"],
        side=Side(row["side"]),
        volume=Decimal(row["volume"]),
        provider_price=_text_to_decimal(row["provider_price"]),
        offered_price=_text_to_decimal(row["offered_price"]),
        created_at=_text_to_datetime(row["created_at"]),
        expires_at=_text_to_datetime(row["expires_at"]),
        state=QuoteState(row["state"]),
        executed_at=_text_to_datetime(row["executed_at"]),
        execution_id=row["execution_id"],
        failure_reason=row["failure_reason"],
    )
