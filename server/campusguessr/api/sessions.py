"""Game session API endpoints.

This is the thin FastAPI adapter between the web client and GameSession.
Every operation answers with the session snapshot plus ``applied``, telling
the client whether the operation took effect. A failed photo load is not an
HTTP error: it shows up as ``"error": "load_failure"`` in the snapshot.
"""

from __future__ import annotations

import json
import math

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from campusguessr.core.aggregator import summarize
from campusguessr.core.models import Point, Screen
from campusguessr.core.registry import RegistryFullError
from campusguessr.core.session import GameSession

router = APIRouter(prefix="/api/v1")


def _public_snapshot(session: GameSession) -> dict:
    """Session snapshot as sent to clients. The target stays hidden while guessing."""
    snap = session.snapshot()
    if session.screen is Screen.GAME:
        snap["current_target"] = None
    return snap


def _respond(session: GameSession, applied: bool, status_code: int = 200) -> JSONResponse:
    body = _public_snapshot(session)
    body["applied"] = applied
    return JSONResponse(content=body, status_code=status_code)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(content={"error": message}, status_code=status_code)


def _session_or_none(session_id: str) -> GameSession | None:
    from campusguessr.main import get_registry

    return get_registry().get(session_id)


async def _read_json(request: Request) -> dict | None:
    try:
        body = json.loads(await request.body())
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None
    return body if isinstance(body, dict) else None


def _finite_float(value) -> float | None:
    """Map coordinate from JSON, or None unless it is a finite number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    return value if math.isfinite(value) else None


@router.post("/sessions")
async def create_session() -> JSONResponse:
    """Create a session on the title screen."""
    from campusguessr.main import get_registry

    try:
        session = get_registry().create()
    except RegistryFullError as e:
        return _error(503, str(e))
    return _respond(session, True, status_code=201)


@router.get("/sessions/{session_id}")
async def get_session(session_id: str) -> JSONResponse:
    session = _session_or_none(session_id)
    if session is None:
        return _error(404, "session not found")
    return JSONResponse(content=_public_snapshot(session))


@router.delete("/sessions/{session_id}")
async def delete_session(session_id: str) -> JSONResponse:
    from campusguessr.main import get_registry

    registry = get_registry()
    session = registry.get(session_id)
    if session is None:
        return _error(404, "session not found")
    # Drop any photo load still in flight for this session.
    session.reset_to_title()
    registry.remove(session_id)
    return JSONResponse(content={"deleted": True})


@router.post("/sessions/{session_id}/start")
async def start_match(session_id: str) -> JSONResponse:
    session = _session_or_none(session_id)
    if session is None:
        return _error(404, "session not found")
    applied = await session.start_match()
    return _respond(session, applied)


@router.put("/sessions/{session_id}/guess/location")
async def set_guess_location(session_id: str, request: Request) -> JSONResponse:
    """Place the guess marker. Body: {"x": 42.5, "y": 61.0}"""
    session = _session_or_none(session_id)
    if session is None:
        return _error(404, "session not found")

    body = await _read_json(request)
    if body is None:
        return _error(400, "invalid JSON")
    x, y = _finite_float(body.get("x")), _finite_float(body.get("y"))
    if x is None or y is None:
        return _error(400, "x and y must be finite numbers")

    applied = session.set_guess_location(Point(x=x, y=y))
    return _respond(session, applied)


@router.put("/sessions/{session_id}/guess/floor")
async def set_guess_floor(session_id: str, request: Request) -> JSONResponse:
    """Pick a floor. Body: {"floor": 2}"""
    session = _session_or_none(session_id)
    if session is None:
        return _error(404, "session not found")

    body = await _read_json(request)
    if body is None:
        return _error(400, "invalid JSON")
    floor = body.get("floor")
    if isinstance(floor, bool) or not isinstance(floor, int):
        return _error(400, "floor must be an integer")

    applied = session.set_guess_floor(floor)
    return _respond(session, applied)


@router.post("/sessions/{session_id}/submit")
async def submit_guess(session_id: str) -> JSONResponse:
    session = _session_or_none(session_id)
    if session is None:
        return _error(404, "session not found")
    applied = session.submit_guess()
    return _respond(session, applied)


@router.post("/sessions/{session_id}/advance")
async def advance(session_id: str) -> JSONResponse:
    session = _session_or_none(session_id)
    if session is None:
        return _error(404, "session not found")
    applied = await session.advance()
    return _respond(session, applied)


@router.post("/sessions/{session_id}/final")
async def view_final_results(session_id: str) -> JSONResponse:
    session = _session_or_none(session_id)
    if session is None:
        return _error(404, "session not found")
    applied = session.view_final_results()
    return _respond(session, applied)


@router.post("/sessions/{session_id}/play-again")
async def play_again(session_id: str) -> JSONResponse:
    session = _session_or_none(session_id)
    if session is None:
        return _error(404, "session not found")
    applied = await session.play_again()
    return _respond(session, applied)


@router.post("/sessions/{session_id}/reset")
async def reset_to_title(session_id: str) -> JSONResponse:
    session = _session_or_none(session_id)
    if session is None:
        return _error(404, "session not found")
    applied = session.reset_to_title()
    return _respond(session, applied)


@router.get("/sessions/{session_id}/summary")
async def get_summary(session_id: str) -> JSONResponse:
    """Totals and performance tier over the rounds played so far.

    Includes a per-round breakdown for the final results screen.
    """
    session = _session_or_none(session_id)
    if session is None:
        return _error(404, "session not found")

    history = session.history
    result = summarize(history).to_dict()
    result["rounds"] = [
        {
            "round_number": r.round_number,
            "image_ref": r.image_ref,
            "location_score": r.location_score,
            "floor_correct": r.floor_correct,
            "score": r.score,
        }
        for r in history
    ]
    return JSONResponse(content=result)
