"""SQLite connection for the quote store.

One aiosqlite connection per process, opened in WAL mode with rows returned
as ``aiosqlite.Row`` so the repository can read columns by name. Numbered
``migrations/NNN_*.sql`` scripts are applied on connect and recorded in
``schema_version``.
"""

import datetime
import logging
from pathlib import Path
from types import TracebackType

import aiosqlite

logger = logging.getLogger(__name__)

_MIGRATIONS_DIR = Path(__file__).parent / "migrations"

IN_MEMORY = ":memory:"


def _discover_migrations() -> list[tuple[int, Path]]:
    """Return ``(version, path)`` for every migration script, lowest version first."""
    scripts = [(int(path.name.split("_", 1)[0]), path) for path in _MIGRATIONS_DIR.glob("*.sql")]
    return sorted(scripts)


class Database:
    """Async SQLite database holding the ``swaps`` table.

    Usage::

        async with Database("data/swapper.db") as db:
            repo = QuoteRepository(db)
    """

    def __init__(self, db_path: str = "data/swapper.db") -> None:
        self._db_path = db_path
        self._connection: aiosqlite.Connection | None = None

    @property
    def connection(self) -> aiosqlite.Connection:
        """The open connection.

        Raises:
            RuntimeError: If ``connect()`` has not been awaited.
        """
        if self._connection is None:
            msg = f"Database {self._db_path} is not connected; await connect() first."
            raise RuntimeError(msg)
        return self._connection

    async def connect(self) -> None:
        """Open the file (creating its directory), set pragmas, migrate."""
        if self._db_path != IN_MEMORY:
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        conn = await aiosqlite.connect(self._db_path)
        conn.row_factory = aiosqlite.Row
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")
        self._connection = conn

        applied = await self._migrate()
        logger.info(
            "Database connected: %s (schema v%d, %d migration(s) applied now)",
            self._db_path,
            await self.schema_version(),
            applied,
        )

    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._connection is None:
            return
        await self._connection.close()
        self._connection = None
        logger.info("Database closed: %s", self._db_path)

    async def schema_version(self) -> int:
        """Highest applied migration version, 0 for an empty database."""
        async with self.connection.execute("SELECT MAX(version) FROM schema_version") as cursor:
            row = await cursor.fetchone()
        return 0 if row is None or row[0] is None else int(row[0])

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _migrate(self) -> int:
        """Apply every migration newer than the recorded schema version.

        Returns:
            How many scripts were applied by this call.
        """
        conn = self.connection
        await conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_version "
            "(version INTEGER PRIMARY KEY, applied_at TEXT NOT NULL)"
        )
        await conn.commit()

        current = await self.schema_version()
        pending = [(v, path) for v, path in _discover_migrations() if v > current]

        for version, path in pending:
            logger.info("Applying migration %03d (%s)", version, path.name)
            # executescript() commits first; a script that fails midway is
            # left unrecorded and runs again on the next connect.
            await conn.executescript(path.read_text(encoding="utf-8"))
            await conn.execute(
                "INSERT INTO schema_version (version, applied_at) VALUES (?, ?)",
                (version, datetime.datetime.now(datetime.UTC).isoformat()),
            )
            await conn.commit()

        return len(pending)
