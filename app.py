"""
app.py

Responsibility: Builds the FastAPI application, wires the shared HTTP client,
IpService, IpCache and refresh scheduler through the lifespan, and registers
the routes.
Does NOT: contain race logic or route handlers.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI

from config import Settings, load_settings
from logger import configure_logging
from routes.api_routes import router as api_router
from scheduler import create_scheduler
from services.ip_cache import IpCache
from services.ip_service import IpService

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Creates the application.

    Args:
        settings: Runtime settings. When omitted they are loaded from the
            environment, and logging is configured from APP_ENV, when the
            lifespan starts.
        transport: Optional httpx transport for the shared client. Tests pass
            an httpx.MockTransport so no real network call is made.

    Returns:
        A FastAPI app whose lifespan owns the client and the scheduler.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        settings = app.state.settings
        if settings is None:
            settings = load_settings()
            configure_logging(settings.app_env)
            app.state.settings = settings
        http_client = httpx.AsyncClient(transport=transport, timeout=settings.timeout)
        app.state.http_client = http_client
        app.state.ip_cache = IpCache()
        app.state.ip_service = IpService(
            http_client,
            endpoints=settings.endpoints,
            timeout=settings.timeout,
            logger=logging.getLogger("services.ip_service"),
        )
        scheduler = create_scheduler(
            app.state.ip_service,
            app.state.ip_cache,
            interval_seconds=settings.refresh_interval,
        )
        scheduler.start()
        app.state.scheduler = scheduler
        logger.info("whatsmyip started, %d endpoint(s) configured.", len(settings.endpoints))
        try:
            yield
        finally:
            scheduler.shutdown(wait=False)
            await http_client.aclose()
            logger.info("whatsmyip stopped.")

    app = FastAPI(title="whatsmyip", lifespan=lifespan)
    app.state.settings = settings

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(api_router)
    return app


app = create_app()


if __name__ == "__main__":
    _settings = load_settings()
    configure_logging(_settings.app_env)
    uvicorn.run(create_app(_settings), host=_settings.host, port=_settings.port, log_config=None)
