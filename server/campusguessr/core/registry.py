"""Session registry: creates, looks up and expires game sessions.

Sessions live in memory only. A session nobody touched for
``idle_seconds`` is dropped the next time a session is created.
"""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING

import structlog

from campusguessr.core.session import DEFAULT_FALLBACK_TARGET, GameSession

if TYPE_CHECKING:
    from campusguessr.core.models import Target
    from campusguessr.core.stats import GameStats
    from campusguessr.provider.base import LocationProvider

log = structlog.get_logger()


class RegistryFullError(Exception):
    """No room for another session, even after pruning idle ones."""


class SessionRegistry:
    def __init__(
        self,
        provider: LocationProvider,
        stats: GameStats,
        *,
        fallback_target: Target | None = DEFAULT_FALLBACK_TARGET,
        idle_seconds: float = 3600.0,
        max_sessions: int = 10_000,
    ) -> None:
        self._provider = provider
        self._stats = stats
        self._fallback_target = fallback_target
        self._idle_seconds = idle_seconds
        self._max_sessions = max_sessions
        # session_id → (session, time.monotonic() of last access)
        self._sessions: dict[str, tuple[GameSession, float]] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> GameSession:
        now = time.monotonic()
        self.prune_idle(now)
        if len(self._sessions) >= self._max_sessions:
            raise RegistryFullError(f"session limit of {self._max_sessions} reached")

        session_id = str(uuid.uuid4())
        session = GameSession(
            self._provider,
            session_id=session_id,
            fallback_target=self._fallback_target,
            stats=self._stats,
        )
        self._sessions[session_id] = (session, now)
        self._stats.record_session_created(session_id)
        log.info("session_created", session=session_id[:8], sessions=len(self._sessions))
        return session

    def get(self, session_id: str) -> GameSession | None:
        """Look up a session and mark it as recently used."""
        entry = self._sessions.get(session_id)
        if entry is None:
            return None
        session = entry[0]
        self._sessions[session_id] = (session, time.monotonic())
        self._stats.touch(session_id)
        return session

    def remove(self, session_id: str) -> bool:
        if self._sessions.pop(session_id, None) is None:
            return False
        log.info("session_removed", session=session_id[:8])
        return True

    def prune_idle(self, now: float | None = None) -> int:
        """Drop sessions idle for longer than the configured window."""
        if now is None:
            now = time.monotonic()
        cutoff = now - self._idle_seconds
        idle = [sid for sid, (_, seen) in self._sessions.items() if seen < cutoff]
        for sid in idle:
            del self._sessions[sid]
        if idle:
            log.info("idle_sessions_pruned", count=len(idle))
        return len(idle)
