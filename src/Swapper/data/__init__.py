"""Persistence layer for Swapper.

Re-exports the main public API: Database for connection management,
QuoteRepository for quote storage.
"""

from Swapper.data.database import Database
from Swapper.data.repository import QuoteRepository

__all__ = ["Database", "QuoteRepository"]
