"""Tests for the session registry."""

from __future__ import annotations

import time

import pytest

from campusguessr.core.models import Screen
from campusguessr.core.registry import RegistryFullError, SessionRegistry


def test_create_and_get(provider, stats):
    registry = SessionRegistry(provider, stats)
    session = registry.create()
    assert registry.get(session.session_id) is session
    assert session.screen is Screen.TITLE
    assert len(registry) == 1
    assert stats.sessions_created == 1


def test_sessions_are_independent(provider, stats):
    registry = SessionRegistry(provider, stats)
    a = registry.create()
    b = registry.create()
    assert a.session_id != b.session_id
    assert a is not b


def test_remove(provider, stats):
    registry = SessionRegistry(provider, stats)
    session = registry.create()
    assert registry.remove(session.session_id) is True
    assert registry.get(session.session_id) is None
    assert registry.remove(session.session_id) is False


def test_prune_idle(provider, stats):
    registry = SessionRegistry(provider, stats, idle_seconds=60)
    session = registry.create()
    assert registry.prune_idle(time.monotonic()) == 0
    assert registry.prune_idle(time.monotonic() + 120) == 1
    assert registry.get(session.session_id) is None


def test_max_sessions(provider, stats):
    registry = SessionRegistry(provider, stats, max_sessions=2)
    registry.create()
    registry.create()
    with pytest.raises(RegistryFullError):
        registry.create()


@pytest.mark.asyncio
async def test_sessions_share_fallback_setting(provider, stats):
    registry = SessionRegistry(provider, stats, fallback_target=None)
    session = registry.create()
    assert await session.start_match() is True
    assert session.screen is Screen.GAME
