"""Health and readiness check routes."""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from config import settings

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/ready")
async def ready() -> dict:
    """Lightweight readiness check — no external calls."""
    return {"status": "ok", "service": "ziggy-api", "commit": settings.git_sha}


@router.get("/api/health")
async def health() -> dict:
    """Liveness plus config sanity. Never calls run.events."""
    missing = settings.validate()
    return {
        "status": "ok",
        "service": "ziggy-api",
        "commit": settings.git_sha,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "upstream_configured": not missing,
    }
