"""Round scoring, turning a guess into points.

Location score decays exponentially with the distance between the guess and
the target: 5000 points for a perfect guess, about 3033 at 10 map units and
1839 at 20. Picking the wrong floor costs 20% of the location score.

All rounding is half-up (2.5 becomes 3), unlike Python's ``round``.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from campusguessr.core.geometry import distance as _distance
from campusguessr.core.models import RoundRecord

if TYPE_CHECKING:
    from campusguessr.core.models import Guess, Target

# Points for a guess placed exactly on the target.
MAX_LOCATION_SCORE = 5000

# Exponential decay per map unit.
DECAY_RATE = 0.05

# Share of the location score kept, and lost, when the floor is wrong.
WRONG_FLOOR_MULTIPLIER = 0.8
WRONG_FLOOR_PENALTY = 0.2

# Below this many display units a guess is labelled "Perfect!".
PERFECT_LABEL_UNITS = 5


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def location_score(distance: float) -> int:
    score = round_half_up(MAX_LOCATION_SCORE * math.exp(-DECAY_RATE * distance))
    return max(0, min(MAX_LOCATION_SCORE, score))


def round_score(location_score: int, floor_correct: bool) -> int:
    if floor_correct:
        return location_score
    return round_half_up(location_score * WRONG_FLOOR_MULTIPLIER)


def floor_penalty(location_score: int, floor_correct: bool) -> int:
    """Points lost to a wrong floor, as shown on the result screen."""
    if floor_correct:
        return 0
    return round_half_up(location_score * WRONG_FLOOR_PENALTY)


def format_distance_label(distance: float) -> str:
    # One map unit is roughly two feet on the campus map.
    units = round_half_up(distance * 2)
    if units < PERFECT_LABEL_UNITS:
        return "Perfect!"
    return f"{units} ft away"


def build_round_record(
    round_number: int,
    image_ref: str,
    guess: Guess,
    target: Target,
) -> RoundRecord:
    """Score a complete guess against the round's target."""
    if not guess.is_complete():
        raise ValueError("cannot score an incomplete guess")

    dist = _distance(guess.location, target.location)
    loc_score = location_score(dist)
    floor_correct = guess.floor == target.floor
    return RoundRecord(
        round_number=round_number,
        image_ref=image_ref,
        guess_location=guess.location,
        target_location=target.location,
        guess_floor=guess.floor,
        target_floor=target.floor,
        distance=dist,
        location_score=loc_score,
        floor_correct=floor_correct,
        score=round_score(loc_score, floor_correct),
    )
