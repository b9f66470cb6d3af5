"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ZiggyError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class EventNotFoundError(ZiggyError):
    def __init__(self, slug: str):
        super().__init__("Event not found", status_code=404)
        self.slug = slug


class SearchQueryTooShortError(ZiggyError):
    def __init__(self, min_length: int):
        super().__init__(
            f"Search query must be at least {min_length} characters",
            status_code=400,
        )


class UpstreamError(ZiggyError):
    """run.events answered non-2xx, timed out, or could not be reached.

    Retryable from the caller's point of view. ``upstream_status`` is None
    for transport failures.
    """

    def __init__(self, message: str, upstream_status: int | None = None, body: str = ""):
        super().__init__(message, status_code=502)
        self.upstream_status = upstream_status
        self.body = body


class MalformedDataError(ZiggyError):
    """Upstream payload does not match the ingestion schema."""

    def __init__(self, message: str):
        super().__init__(message, status_code=502)


def register_error_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(UpstreamError)
    async def handle_upstream_error(request: Request, exc: UpstreamError):
        logger.warning(
            "Upstream failure on %s (upstream status %s): %s",
            request.url.path,
            exc.upstream_status,
            exc,
        )
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(ZiggyError)
    async def handle_ziggy_error(_request: Request, exc: ZiggyError):
        return JSONResponse({"error": str(exc)}, status_code=exc.status_code)

    @app.exception_handler(ValueError)
    async def handle_value_error(_request: Request, exc: ValueError):
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(Exception)
    async def handle_unexpected(_request: Request, exc: Exception):
        logger.exception("Unhandled error: %s", exc)
        return JSONResponse(
            {"error": "Internal server error"},
            status_code=500,
        )
