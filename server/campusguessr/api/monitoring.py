"""Health check and monitoring endpoints."""

from __future__ import annotations

import json
from pathlib import Path

from fastapi import APIRouter

from campusguessr.core.scoring import MAX_LOCATION_SCORE
from campusguessr.core.session import TOTAL_ROUNDS

router = APIRouter(prefix="/api/v1")

# Load build info once at import time.
_BUILD_INFO_PATH = Path(__file__).parent.parent / "build_info.json"
_BUILD_INFO: dict = {}
if _BUILD_INFO_PATH.exists():
    try:
        _BUILD_INFO = json.loads(_BUILD_INFO_PATH.read_text())
    except (json.JSONDecodeError, OSError):
        pass


@router.get("/health")
async def health() -> dict:
    """Basic health check."""
    from campusguessr.main import get_config, get_registry, get_stats

    config = get_config()
    snapshot = get_stats().snapshot()
    result = {
        "status": "ok",
        "version": "0.1.0",
        "uptime_seconds": snapshot["uptime_seconds"],
        "sessions": len(get_registry()),
        "provider": config.provider.backend,
    }
    result.update(_BUILD_INFO)
    return result


@router.get("/stats")
async def stats() -> dict:
    """Detailed game statistics.

    The ``active_sessions`` section counts sessions touched within
    ``window_seconds``.
    """
    from campusguessr.main import get_stats

    return get_stats().snapshot()


@router.get("/config")
async def get_client_config() -> dict:
    """Configuration endpoint for the web client.

    The client calls this on startup to lay out the floor picker and the
    score bars.
    """
    from campusguessr.main import get_config

    config = get_config()
    return {
        "total_rounds": TOTAL_ROUNDS,
        "max_score_per_round": MAX_LOCATION_SCORE,
        "floors": list(config.game.floors),
        "map_extent": {"min": 0, "max": 100},
    }
