"""
Health check endpoints for production deployment.

Provides:
- /health - Basic liveness check (is the app running?)
- /ready - Readiness check (can the app handle requests?)
- /metrics - Room and connection counts for monitoring
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Response
from pydantic import BaseModel

router = APIRouter(tags=["health"])

# Service references (set during app initialization)
_room_registry = None
_session_table = None


class MetricsResponse(BaseModel):
    timestamp: str
    active_rooms: int = 0
    total_players: int = 0
    games_in_progress: int = 0
    connected_websockets: int = 0


def set_health_dependencies(room_registry=None, session_table=None):
    """Set dependencies for health checks."""
    global _room_registry, _session_table
    _room_registry = room_registry
    _session_table = session_table


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health_check():
    """
    Basic liveness check - is the app running?

    This endpoint should always return 200 if the process is alive.
    """
    return {"status": "ok", "timestamp": _timestamp()}


@router.get("/ready")
async def readiness_check(response: Response):
    """
    Readiness check - can the app accept players?

    The server is memory-resident, so it is ready once the room registry
    has been wired in by the application lifespan.
    """
    ready = _room_registry is not None
    if not ready:
        response.status_code = 503
    return {
        "status": "ok" if ready else "starting",
        "checks": {"room_registry": {"status": "ok" if ready else "not_configured"}},
        "timestamp": _timestamp(),
    }


@router.get("/metrics", response_model=MetricsResponse)
async def metrics() -> MetricsResponse:
    """Expose room and connection counts for dashboards and alerting."""
    result = MetricsResponse(timestamp=_timestamp())

    if _room_registry is not None:
        stats = _room_registry.stats()
        result.active_rooms = stats["active_rooms"]
        result.total_players = stats["total_players"]
        result.games_in_progress = stats["games_in_progress"]

    if _session_table is not None:
        result.connected_websockets = len(_session_table)

    return result
