"""Game session state machine.

One GameSession drives one player's match, screen by screen:

    TITLE --start_match--> GAME --submit_guess--> RESULT --advance--> GAME ...
    RESULT (last round) --advance / view_final_results--> FINAL_RESULTS
    FINAL_RESULTS --play_again--> GAME
    any --reset_to_title--> TITLE

The only suspension point is the location provider fetch inside
``start_match()`` and ``advance()``. Every fetch is tagged with the session
generation; ``reset_to_title()`` bumps the generation so that a fetch which
resolves afterwards is dropped without touching the state.

Operations that are not admissible on the current screen are no-ops and
return False. Provider failures never escape: they are stored as
``ErrorKind.LOAD_FAILURE`` in ``error`` and the caller retries.
"""

from __future__ import annotations

import asyncio
import dataclasses
from typing import TYPE_CHECKING

import structlog

from campusguessr.core.aggregator import total_score
from campusguessr.core.models import (
    ErrorKind,
    Guess,
    LocationImage,
    Point,
    RoundRecord,
    Screen,
    SessionState,
    Target,
)
from campusguessr.core.scoring import build_round_record
from campusguessr.provider.base import ProviderError

if TYPE_CHECKING:
    from campusguessr.core.stats import GameStats
    from campusguessr.provider.base import LocationProvider

log = structlog.get_logger()

# Rounds per match. Fixed for every match, not a runtime setting.
TOTAL_ROUNDS = 5

# Ground truth used for photos whose catalog entry lacks a location or floor.
DEFAULT_FALLBACK_TARGET = Target(location=Point(x=50.0, y=50.0), floor=1)


class MalformedTargetError(ProviderError):
    """The provider returned a photo without a usable location or floor."""


class GameSession:
    """Single-writer controller owning the state of one match."""

    def __init__(
        self,
        provider: LocationProvider,
        *,
        session_id: str = "",
        fallback_target: Target | None = DEFAULT_FALLBACK_TARGET,
        stats: GameStats | None = None,
    ) -> None:
        self.session_id = session_id
        self._provider = provider
        self._fallback_target = fallback_target
        self._stats = stats
        self._state = SessionState(total_rounds=TOTAL_ROUNDS)
        self._generation = 0
        self._log = log.bind(session=session_id[:8])

    # ---------- read accessors ----------

    @property
    def screen(self) -> Screen:
        return self._state.screen

    @property
    def round_number(self) -> int:
        return self._state.round_number

    @property
    def total_rounds(self) -> int:
        return self._state.total_rounds

    @property
    def current_image(self) -> LocationImage | None:
        return self._state.current_image

    @property
    def current_target(self) -> Target | None:
        return self._state.current_target

    @property
    def guess(self) -> Guess:
        return self._state.guess

    @property
    def current_record(self) -> RoundRecord | None:
        return self._state.current_record

    @property
    def history(self) -> tuple[RoundRecord, ...]:
        return tuple(self._state.history)

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> ErrorKind | None:
        return self._state.error

    @property
    def is_last_round(self) -> bool:
        return self._state.round_number >= self._state.total_rounds

    # ---------- match lifecycle ----------

    async def start_match(self) -> bool:
        """Start a fresh match and load its first photo.

        Admissible from TITLE and FINAL_RESULTS. On failure the session is
        left on TITLE with ``error`` set.
        """
        if self._state.screen not in (Screen.TITLE, Screen.FINAL_RESULTS) or self._state.loading:
            return False

        self._generation += 1
        self._state = SessionState(total_rounds=TOTAL_ROUNDS)
        if self._stats is not None:
            self._stats.record_match_started()
        self._log.info("match_started", generation=self._generation)

        loaded = await self._fetch()
        if loaded is None:
            return False
        self._begin_round(*loaded, round_number=1)
        return True

    async def play_again(self) -> bool:
        if self._state.screen is not Screen.FINAL_RESULTS:
            return False
        return await self.start_match()

    async def advance(self) -> bool:
        """Leave the result screen.

        Before the last round this loads the next photo; on the last round it
        goes straight to FINAL_RESULTS without fetching. A failed fetch keeps
        the session on RESULT so the round just played is not lost.
        """
        state = self._state
        if state.screen is not Screen.RESULT or state.loading:
            return False

        if len(state.history) >= state.total_rounds:
            self._finish()
            return True

        loaded = await self._fetch()
        if loaded is None:
            return False
        self._begin_round(*loaded, round_number=self._state.round_number + 1)
        return True

    def view_final_results(self) -> bool:
        state = self._state
        if state.screen is not Screen.RESULT or state.loading:
            return False
        if state.round_number != state.total_rounds:
            return False
        self._finish()
        return True

    def reset_to_title(self) -> bool:
        """Drop all match state. Any fetch still in flight is discarded."""
        self._generation += 1
        self._state = SessionState(total_rounds=TOTAL_ROUNDS)
        self._log.info("session_reset", generation=self._generation)
        return True

    # ---------- guessing ----------

    def set_guess_location(self, location: Point) -> bool:
        if not self._accepts_guess():
            return False
        self._state.guess = dataclasses.replace(self._state.guess, location=location)
        return True

    def set_guess_floor(self, floor: int) -> bool:
        if not self._accepts_guess():
            return False
        self._state.guess = dataclasses.replace(self._state.guess, floor=floor)
        return True

    def submit_guess(self) -> bool:
        """Score the current guess. A no-op unless the guess is complete."""
        state = self._state
        if (
            not self._accepts_guess()
            or state.current_target is None
            or state.current_image is None
            or not state.guess.is_complete()
        ):
            self._log.debug("submit_ignored", screen=state.screen.value,
                            round=state.round_number)
            return False

        record = build_round_record(
            round_number=state.round_number,
            image_ref=state.current_image.image_ref,
            guess=state.guess,
            target=state.current_target,
        )
        state.history.append(record)
        state.current_record = record
        state.screen = Screen.RESULT

        if self._stats is not None:
            self._stats.record_round(record.score, record.location_score, record.floor_correct)
        self._log.info("guess_submitted", round=record.round_number,
                       distance=round(record.distance, 2),
                       floor_correct=record.floor_correct, score=record.score)
        return True

    # ---------- serialization ----------

    def snapshot(self) -> dict:
        """Return a JSON-serializable view of the whole session state."""
        state = self._state
        image = state.current_image
        target = state.current_target
        guess = state.guess
        return {
            "session_id": self.session_id,
            "screen": state.screen.value,
            "round_number": state.round_number,
            "total_rounds": state.total_rounds,
            "image": None if image is None else {
                "image_ref": image.image_ref,
                "description": image.description,
            },
            "current_target": None if target is None else {
                "location": target.location.to_dict(),
                "floor": target.floor,
            },
            "guess": {
                "location": None if guess.location is None else guess.location.to_dict(),
                "floor": guess.floor,
                "complete": guess.is_complete(),
            },
            "current_record": None if state.current_record is None else state.current_record.to_dict(),
            "history": [r.to_dict() for r in state.history],
            "total_score": total_score(state.history),
            "loading": state.loading,
            "error": None if state.error is None else state.error.value,
        }

    # ---------- helpers ----------

    def _accepts_guess(self) -> bool:
        return self._state.screen is Screen.GAME and not self._state.loading

    def _resolve_target(self, image: LocationImage) -> Target:
        """Build the round's ground truth, filling gaps from the fallback target."""
        if image.location is not None and image.floor is not None:
            return Target(location=image.location, floor=image.floor)
        if self._fallback_target is None:
            raise MalformedTargetError(f"photo {image.image_ref!r} has no location or floor")

        self._log.warning("target_fallback_used", image=image.image_ref,
                          missing_location=image.location is None,
                          missing_floor=image.floor is None)
        return Target(
            location=image.location if image.location is not None else self._fallback_target.location,
            floor=image.floor if image.floor is not None else self._fallback_target.floor,
        )

    async def _fetch(self) -> tuple[LocationImage, Target] | None:
        """Fetch the next photo. Returns None on failure or when the result went stale."""
        generation = self._generation
        self._state.loading = True
        self._state.error = None

        try:
            image = await self._provider.fetch_next_target()
            target = self._resolve_target(image)
        except Exception:
            if generation != self._generation:
                self._discard_stale(generation)
                return None
            self._log.warning("target_load_failed", round=self._state.round_number,
                              exc_info=True)
            self._state.loading = False
            self._state.error = ErrorKind.LOAD_FAILURE
            if self._stats is not None:
                self._stats.record_load_failure()
            return None
        except asyncio.CancelledError:
            if generation == self._generation:
                self._state.loading = False
            raise

        if generation != self._generation:
            self._discard_stale(generation)
            return None

        self._state.loading = False
        return image, target

    def _discard_stale(self, generation: int) -> None:
        self._log.info("stale_fetch_discarded", fetch_generation=generation,
                       generation=self._generation)
        if self._stats is not None:
            self._stats.record_stale_fetch()

    def _begin_round(self, image: LocationImage, target: Target, *, round_number: int) -> None:
        state = self._state
        state.current_image = image
        state.current_target = target
        state.guess = Guess()
        state.current_record = None
        state.round_number = round_number
        state.screen = Screen.GAME
        self._log.info("target_loaded", round=round_number, image=image.image_ref)

    def _finish(self) -> None:
        state = self._state
        state.current_record = None
        state.screen = Screen.FINAL_RESULTS
        if self._stats is not None:
            self._stats.record_match_completed()
        self._log.info("match_finished", rounds=len(state.history),
                       total_score=total_score(state.history))
