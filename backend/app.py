"""FastAPI application entry point for the live stream tracker API."""

import logging
import sys
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, settings as default_settings
from errors import register_error_handlers
from services.cache import TTLCache

# Structured logging: JSON for production, human-readable for local
if default_settings.is_production:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the app. ``transport`` replaces the network layer of the YouTube client."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        missing = settings.validate()
        if missing:
            logger.warning("Missing env vars (live stream fetches will fail): %s", ", ".join(missing))

        app.state.cache.start()
        app.state.http_client = httpx.AsyncClient(timeout=settings.request_timeout, transport=transport)
        try:
            yield
        finally:
            await app.state.http_client.aclose()
            await app.state.cache.stop()

    app = FastAPI(title="Live Stream Tracker API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.cache = TTLCache(sweep_interval_ms=settings.cache_sweep_interval_ms)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.health import router as health_router
    from routes.live import router as live_router

    app.include_router(health_router)
    app.include_router(live_router)

    return app


app = create_app()


if __name__ == "__main__":
    logger.info("API endpoint: http://localhost:%d/api/live", default_settings.port)
    uvicorn.run(app, host=default_settings.host, port=default_settings.port)
