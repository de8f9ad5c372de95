"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter

from aircraft_tracker.config import settings

router = APIRouter()


@router.get("/health", summary="Health check")
def health_check() -> dict[str, str]:
    """Simple health check endpoint."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "env": settings.tracker_env,
    }
