"""Health check routes for the TaskSync API server."""

from datetime import datetime, timezone
from fastapi import APIRouter

from tasksync import __version__

router = APIRouter(tags=["health"])


@router.get("/api/v1/health")
async def health_check():
    """Health check endpoint.

    Returns:
        dict: Health status, timestamp, and version
    """
    return {
        "status": "OK",
        "message": "Backend ready!",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
    }
