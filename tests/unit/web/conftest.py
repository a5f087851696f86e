"""Shared fixtures for web route tests.

The app is built with explicit Settings and its QuoteService dependency is
overridden, so route tests never open a database or reach OKX.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from Swapper.config import Settings
from Swapper.services.quote_service import QuoteService
from Swapper.web.app import create_app
from Swapper.web.deps import get_quote_service


@pytest.fixture()
def service(gateway: AsyncMock, store: AsyncMock, settings: Settings, clock) -> QuoteService:
    """A real QuoteService wired to mocked collaborators and a frozen clock."""
    return QuoteService(gateway=gateway, store=store, settings=settings, clock=clock)


@pytest.fixture()
def app(settings: Settings, service: QuoteService) -> FastAPI:
    """Create a test app with the QuoteService dependency overridden."""
    test_app = create_app(settings)
    test_app.dependency_overrides[get_quote_service] = lambda: service
    return test_app


@pytest.fixture()
def client(app: FastAPI) -> TestClient:
    """Synchronous test client; the lifespan is not entered."""
    return TestClient(app, raise_server_exceptions=False)
