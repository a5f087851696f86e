"""Exchange gateway and quote lifecycle services.

Re-exports all public service classes so consumers can import directly:
    from Swapper.services import OkxGateway, QuoteService
"""

from Swapper.services.gateway import ExchangeGateway, QuoteStore
from Swapper.services.okx import OkxGateway
from Swapper.services.quote_service import QuoteService

__all__ = [
    # Contracts
    "ExchangeGateway",
    "QuoteStore",
    # Implementations
    "OkxGateway",
    "QuoteService",
]
