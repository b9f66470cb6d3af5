"""FastAPI application entry point for the Ziggy kiosk API."""

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from errors import register_error_handlers
from services.agenda import EventAggregator
from services.cache import cache
from services.records import InMemoryRecordStore
from services.run_events import RunEventsClient

# Structured logging: JSON for production, human-readable for local
if settings.is_production:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    missing = settings.validate()
    if missing:
        logger.warning("Missing env vars (run.events calls will fail): %s", ", ".join(missing))

    client = RunEventsClient(
        api_key=settings.run_events_api_key or "",
        base_url=settings.run_events_api_base,
        timeout_seconds=settings.upstream_timeout_seconds,
    )
    app.state.aggregator = EventAggregator(
        client,
        cache,
        ttl_seconds=settings.cache_ttl_seconds,
        default_time_zone=settings.default_time_zone,
    )
    app.state.record_store = InMemoryRecordStore()
    logger.info("Ziggy API ready for event %s (%s)", settings.event_slug, settings.environment)

    yield

    await client.aclose()


def create_app() -> FastAPI:
    app = FastAPI(title="Ziggy API", version="1.0.0", lifespan=lifespan)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
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
    from routes.events import router as events_router

    app.include_router(health_router)
    app.include_router(events_router)

    return app


app = create_app()
