"""Health and readiness check routes."""

from fastapi import APIRouter, Request

from services.aggregator import utc_now_iso

router = APIRouter()

SERVICE_NAME = "livestream-tracker-api"


@router.get("/ready")
async def ready(request: Request) -> dict:
    """Lightweight readiness check — no external calls."""
    settings = request.app.state.settings
    return {"status": "ok", "service": SERVICE_NAME, "commit": settings.git_sha}


@router.get("/health")
async def health(request: Request) -> dict:
    """Health check with configuration and cache state. No YouTube calls."""
    settings = request.app.state.settings
    return {
        "status": "ok",
        "timestamp": utc_now_iso(),
        "service": SERVICE_NAME,
        "commit": settings.git_sha,
        "api_key_configured": settings.has_api_key,
        "cache_entries": len(request.app.state.cache),
    }
