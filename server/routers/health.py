"""
Health check endpoints for deployment.

Provides:
- /health - Basic liveness check (is the app running?)
- /ready - Readiness check (is the room registry wired up?)
- /metrics - Table counts for monitoring
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

# Set during app startup
_room_manager = None


def set_health_dependencies(room_manager=None):
    """Set dependencies for health checks."""
    global _room_manager
    _room_manager = room_manager


@router.get("/health")
async def health_check():
    """
    Basic liveness check.

    Always returns 200 while the process is alive.
    """
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/ready")
async def readiness_check():
    """Returns 503 until the room registry has been installed."""
    ready = _room_manager is not None
    return JSONResponse(
        content={
            "status": "ok" if ready else "starting",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        status_code=200 if ready else 503,
    )


@router.get("/metrics")
async def metrics():
    """Operational counts for dashboards and alerting."""
    metrics_data = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    if _room_manager is not None:
        rooms = _room_manager.rooms
        metrics_data.update({
            "active_rooms": len(rooms),
            "total_players": sum(len(r.players) for r in rooms.values()),
            "hands_in_progress": sum(1 for r in rooms.values() if r.hand_in_progress()),
            "hands_played": sum(r.hands_played for r in rooms.values()),
        })

    return metrics_data
