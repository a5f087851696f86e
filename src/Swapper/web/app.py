"""FastAPI app factory and application lifespan."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from Swapper.config import Settings
from Swapper.data.database import Database
from Swapper.logging_config import configure_logging
from Swapper.services.okx import OkxGateway
from Swapper.web.middleware import RequestLoggingMiddleware, register_exception_handlers
from Swapper.web.routes import swap_router

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Settings are loaded (and validated) eagerly, so a bad fee table fails
    here with ConfigurationError rather than on the first request.
    """
    configure_logging()
    app_settings = settings if settings is not None else Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        database = Database(app_settings.database_path)
        gateway = OkxGateway.from_settings(app_settings)
        await database.connect()
        app.state.database = database
        app.state.gateway = gateway
        try:
            yield
        finally:
            await gateway.aclose()
            await database.close()

    app = FastAPI(title="Swapper", lifespan=lifespan)
    app.state.settings = app_settings

    app.include_router(swap_router)
    register_exception_handlers(app)
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/api/health")
    async def health_check() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    logger.info("Swapper web app created")
    return app
