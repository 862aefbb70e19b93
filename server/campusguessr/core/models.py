"""CampusGuessr — core internal data models.

These are plain dataclasses with no framework dependencies.
JSON payloads are converted to/from these at the boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Screen(Enum):
    """Which screen the session is on. Governs the admissible operations."""
    TITLE = "title"
    GAME = "game"
    RESULT = "result"
    FINAL_RESULTS = "final_results"


class ErrorKind(Enum):
    LOAD_FAILURE = "load_failure"


class Tier(Enum):
    PERFECT = "perfect"
    EXCELLENT = "excellent"
    GREAT = "great"
    GOOD = "good"
    KEEP_PRACTICING = "keep_practicing"
    BEGINNER = "beginner"

    @property
    def label(self) -> str:
        return _TIER_LABELS[self]


_TIER_LABELS = {
    Tier.PERFECT: "Perfect!",
    Tier.EXCELLENT: "Excellent!",
    Tier.GREAT: "Great!",
    Tier.GOOD: "Good",
    Tier.KEEP_PRACTICING: "Keep Practicing",
    Tier.BEGINNER: "Beginner",
}


@dataclass(frozen=True)
class Point:
    """A position on the campus map, 0-100 on each axis. Not clamped."""
    x: float
    y: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Target:
    location: Point
    floor: int


@dataclass(frozen=True)
class Guess:
    location: Point | None = None
    floor: int | None = None

    def is_complete(self) -> bool:
        """A guess can only be submitted once both fields are set."""
        return self.location is not None and self.floor is not None


@dataclass(frozen=True)
class LocationImage:
    """One photo as handed out by a location provider.

    ``location`` or ``floor`` may be missing when the upstream catalog entry
    is malformed; the session decides what to do about it.
    """
    image_ref: str
    location: Point | None = None
    floor: int | None = None
    description: str = ""


@dataclass(frozen=True)
class RoundRecord:
    round_number: int
    image_ref: str
    guess_location: Point
    target_location: Point
    guess_floor: int
    target_floor: int
    distance: float
    location_score: int
    floor_correct: bool
    score: int

    @property
    def floor_penalty(self) -> int:
        from campusguessr.core.scoring import floor_penalty

        return floor_penalty(self.location_score, self.floor_correct)

    @property
    def distance_label(self) -> str:
        from campusguessr.core.scoring import format_distance_label

        return format_distance_label(self.distance)

    def to_dict(self) -> dict:
        return {
            "round_number": self.round_number,
            "image_ref": self.image_ref,
            "guess_location": self.guess_location.to_dict(),
            "target_location": self.target_location.to_dict(),
            "guess_floor": self.guess_floor,
            "target_floor": self.target_floor,
            "distance": self.distance,
            "distance_label": self.distance_label,
            "location_score": self.location_score,
            "floor_correct": self.floor_correct,
            "floor_penalty": self.floor_penalty,
            "score": self.score,
        }


@dataclass
class SessionState:
    """Mutable state of one session. Owned by exactly one GameSession."""
    screen: Screen = Screen.TITLE
    round_number: int = 1
    total_rounds: int = 5
    current_image: LocationImage | None = None
    current_target: Target | None = None
    guess: Guess = field(default_factory=Guess)
    current_record: RoundRecord | None = None
    history: list[RoundRecord] = field(default_factory=list)
    loading: bool = False
    error: ErrorKind | None = None
