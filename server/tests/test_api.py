"""Tests for the session and monitoring API endpoints."""

from __future__ import annotations

import json

import pytest


async def _new_session(client) -> str:
    resp = await client.post("/api/v1/sessions")
    assert resp.status_code == 201
    return resp.json()["session_id"]


async def _guess(client, sid: str, x: float, y: float, floor: int) -> None:
    resp = await client.put(f"/api/v1/sessions/{sid}/guess/location", json={"x": x, "y": y})
    assert resp.json()["applied"] is True
    resp = await client.put(f"/api/v1/sessions/{sid}/guess/floor", json={"floor": floor})
    assert resp.json()["applied"] is True


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "ok"
    assert "uptime_seconds" in data
    assert data["sessions"] == 0


@pytest.mark.asyncio
async def test_config_endpoint(client):
    resp = await client.get("/api/v1/config")
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_rounds"] == 5
    assert data["max_score_per_round"] == 5000
    assert data["floors"] == [1, 2, 3, 4]


@pytest.mark.asyncio
async def test_create_session(client):
    resp = await client.post("/api/v1/sessions")
    assert resp.status_code == 201
    data = resp.json()
    assert data["screen"] == "title"
    assert data["round_number"] == 1
    assert data["history"] == []
    assert data["applied"] is True


@pytest.mark.asyncio
async def test_unknown_session(client):
    resp = await client.get("/api/v1/sessions/does-not-exist")
    assert resp.status_code == 404
    resp = await client.post("/api/v1/sessions/does-not-exist/start")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_target_hidden_while_guessing(client):
    sid = await _new_session(client)
    resp = await client.post(f"/api/v1/sessions/{sid}/start")
    data = resp.json()
    assert data["applied"] is True
    assert data["screen"] == "game"
    assert data["image"]["image_ref"] == "https://img.test/1.jpg"
    assert data["current_target"] is None

    await _guess(client, sid, 53, 54, 2)
    resp = await client.post(f"/api/v1/sessions/{sid}/submit")
    data = resp.json()
    assert data["screen"] == "result"
    assert data["current_target"]["floor"] == 2
    assert data["current_record"]["distance"] == 5
    assert data["current_record"]["location_score"] == 3894
    assert data["current_record"]["score"] == 3894


@pytest.mark.asyncio
async def test_incomplete_submit_not_applied(client):
    sid = await _new_session(client)
    await client.post(f"/api/v1/sessions/{sid}/start")
    await client.put(f"/api/v1/sessions/{sid}/guess/location", json={"x": 1, "y": 1})

    resp = await client.post(f"/api/v1/sessions/{sid}/submit")
    assert resp.status_code == 200
    data = resp.json()
    assert data["applied"] is False
    assert data["screen"] == "game"
    assert data["history"] == []


@pytest.mark.asyncio
async def test_invalid_guess_bodies(client):
    sid = await _new_session(client)
    await client.post(f"/api/v1/sessions/{sid}/start")

    resp = await client.put(
        f"/api/v1/sessions/{sid}/guess/location",
        content="not json",
        headers={"content-type": "application/json"},
    )
    assert resp.status_code == 400

    resp = await client.put(f"/api/v1/sessions/{sid}/guess/location", json={"x": "left", "y": 1})
    assert resp.status_code == 400

    resp = await client.put(f"/api/v1/sessions/{sid}/guess/floor", json={"floor": 1.5})
    assert resp.status_code == 400

    resp = await client.put(f"/api/v1/sessions/{sid}/guess/floor", json={"floor": True})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_full_match_and_summary(client, provider):
    sid = await _new_session(client)
    await client.post(f"/api/v1/sessions/{sid}/start")

    for _ in range(5):
        await _guess(client, sid, 50, 50, 2)
        resp = await client.post(f"/api/v1/sessions/{sid}/submit")
        assert resp.json()["current_record"]["score"] == 5000
        resp = await client.post(f"/api/v1/sessions/{sid}/advance")
        assert resp.json()["applied"] is True

    data = resp.json()
    assert data["screen"] == "final_results"
    assert data["total_score"] == 25000
    assert provider.calls == 5

    resp = await client.get(f"/api/v1/sessions/{sid}/summary")
    summary = resp.json()
    assert summary["total_score"] == 25000
    assert summary["max_possible"] == 25000
    assert summary["tier"] == "perfect"
    assert summary["tier_label"] == "Perfect!"
    assert [r["round_number"] for r in summary["rounds"]] == [1, 2, 3, 4, 5]

    resp = await client.post(f"/api/v1/sessions/{sid}/play-again")
    data = resp.json()
    assert data["applied"] is True
    assert data["screen"] == "game"
    assert data["history"] == []

    resp = await client.get("/api/v1/stats")
    stats = resp.json()
    assert stats["matches_started"] == 2
    assert stats["matches_completed"] == 1
    assert stats["rounds_scored"] == 5


@pytest.mark.asyncio
async def test_final_endpoint_needs_last_round(client):
    sid = await _new_session(client)
    await client.post(f"/api/v1/sessions/{sid}/start")
    await _guess(client, sid, 50, 50, 2)
    await client.post(f"/api/v1/sessions/{sid}/submit")

    resp = await client.post(f"/api/v1/sessions/{sid}/final")
    assert resp.json()["applied"] is False
    assert resp.json()["screen"] == "result"


@pytest.mark.asyncio
async def test_load_failure_reported_in_snapshot(client, provider):
    provider.fail_on = {1}
    sid = await _new_session(client)

    resp = await client.post(f"/api/v1/sessions/{sid}/start")
    assert resp.status_code == 200
    data = resp.json()
    assert data["applied"] is False
    assert data["screen"] == "title"
    assert data["error"] == "load_failure"
    assert data["loading"] is False

    resp = await client.post(f"/api/v1/sessions/{sid}/start")
    data = resp.json()
    assert data["screen"] == "game"
    assert data["error"] is None


@pytest.mark.asyncio
async def test_reset_and_delete(client):
    sid = await _new_session(client)
    await client.post(f"/api/v1/sessions/{sid}/start")

    resp = await client.post(f"/api/v1/sessions/{sid}/reset")
    assert resp.json()["screen"] == "title"

    resp = await client.delete(f"/api/v1/sessions/{sid}")
    assert resp.status_code == 200
    assert json.loads(resp.content) == {"deleted": True}

    resp = await client.get(f"/api/v1/sessions/{sid}")
    assert resp.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", [
    '{"x": 1e400, "y": 50}',
    '{"x": NaN, "y": 50}',
    '{"x": 50, "y": -Infinity}',
    '{"x": 1' + "0" * 400 + ', "y": 50}',
])
async def test_non_finite_location_rejected(client, raw):
    sid = await _new_session(client)
    await client.post(f"/api/v1/sessions/{sid}/start")
    await client.put(f"/api/v1/sessions/{sid}/guess/location", json={"x": 10, "y": 20})

    resp = await client.put(
        f"/api/v1/sessions/{sid}/guess/location",
        content=raw,
        headers={"content-type": "application/json"},
    )
    assert resp.status_code == 400

    resp = await client.get(f"/api/v1/sessions/{sid}")
    assert resp.status_code == 200
    assert resp.json()["guess"]["location"] == {"x": 10.0, "y": 20.0}
