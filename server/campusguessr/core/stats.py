"""Game statistics and active-session tracking.

Tracks in-memory counters and a sliding window of recently active sessions.
No framework dependencies.
"""

from __future__ import annotations

import threading
import time

from campusguessr.core.scoring import MAX_LOCATION_SCORE


class GameStats:
    """Thread-safe game statistics with active-session tracking.

    A session is considered active if any operation touched it within
    ``active_window_seconds`` (default 300s).
    """

    def __init__(self, active_window_seconds: float = 300.0) -> None:
        self._lock = threading.Lock()
        self._started_at = time.time()
        self._active_window = active_window_seconds

        # Counters
        self.sessions_created: int = 0
        self.matches_started: int = 0
        self.matches_completed: int = 0
        self.rounds_scored: int = 0
        self.perfect_rounds: int = 0
        self.floors_correct: int = 0
        self.points_awarded: int = 0
        self.load_failures: int = 0
        self.stale_fetches: int = 0

        # Session tracking: session_id → time.monotonic() of last activity
        self._sessions: dict[str, float] = {}

    def touch(self, session_id: str) -> None:
        with self._lock:
            self._sessions[session_id] = time.monotonic()

    def record_session_created(self, session_id: str) -> None:
        with self._lock:
            self.sessions_created += 1
            self._sessions[session_id] = time.monotonic()

    def record_match_started(self) -> None:
        with self._lock:
            self.matches_started += 1

    def record_match_completed(self) -> None:
        with self._lock:
            self.matches_completed += 1

    def record_round(self, score: int, location_score: int, floor_correct: bool) -> None:
        """Record a scored round."""
        with self._lock:
            self.rounds_scored += 1
            self.points_awarded += score
            if floor_correct:
                self.floors_correct += 1
            if location_score == MAX_LOCATION_SCORE and floor_correct:
                self.perfect_rounds += 1

    def record_load_failure(self) -> None:
        with self._lock:
            self.load_failures += 1

    def record_stale_fetch(self) -> None:
        with self._lock:
            self.stale_fetches += 1

    def _prune_idle_sessions(self, now: float) -> None:
        """Remove sessions not seen within the active window. Caller holds lock."""
        cutoff = now - self._active_window
        idle = [sid for sid, seen in self._sessions.items() if seen < cutoff]
        for sid in idle:
            del self._sessions[sid]

    def snapshot(self) -> dict:
        """Return a JSON-serializable snapshot of all stats."""
        now_mono = time.monotonic()
        with self._lock:
            self._prune_idle_sessions(now_mono)

            avg = round(self.points_awarded / self.rounds_scored, 1) if self.rounds_scored else 0.0
            return {
                "uptime_seconds": round(time.time() - self._started_at, 1),
                "sessions_created": self.sessions_created,
                "matches_started": self.matches_started,
                "matches_completed": self.matches_completed,
                "rounds_scored": self.rounds_scored,
                "perfect_rounds": self.perfect_rounds,
                "floors_correct": self.floors_correct,
                "points_awarded": self.points_awarded,
                "average_round_score": avg,
                "load_failures": self.load_failures,
                "stale_fetches_discarded": self.stale_fetches,
                "active_sessions": {
                    "total": len(self._sessions),
                    "window_seconds": self._active_window,
                },
            }
