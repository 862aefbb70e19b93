"""Match totals and performance tiers over a round history."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from campusguessr.core.models import Tier
from campusguessr.core.scoring import MAX_LOCATION_SCORE

if TYPE_CHECKING:
    from campusguessr.core.models import RoundRecord

# Inclusive lower bounds, in percent of the maximum possible score.
TIER_THRESHOLDS: list[tuple[float, Tier]] = [
    (95.0, Tier.PERFECT),
    (80.0, Tier.EXCELLENT),
    (60.0, Tier.GREAT),
    (40.0, Tier.GOOD),
    (20.0, Tier.KEEP_PRACTICING),
]


@dataclass(frozen=True)
class MatchSummary:
    total_score: int
    max_possible: int
    percentage: float
    tier: Tier
    rounds_played: int
    floors_correct: int
    perfect_rounds: int
    best_round: int | None
    worst_round: int | None

    def to_dict(self) -> dict:
        return {
            "total_score": self.total_score,
            "max_possible": self.max_possible,
            "percentage": round(self.percentage, 1),
            "tier": self.tier.value,
            "tier_label": self.tier.label,
            "rounds_played": self.rounds_played,
            "floors_correct": self.floors_correct,
            "perfect_rounds": self.perfect_rounds,
            "best_round": self.best_round,
            "worst_round": self.worst_round,
        }


def total_score(history: Sequence[RoundRecord]) -> int:
    return sum(r.score for r in history)


def max_possible(history: Sequence[RoundRecord]) -> int:
    """Maximum for the rounds actually played, so partial matches still rate."""
    return len(history) * MAX_LOCATION_SCORE


def percentage(total: int, maximum: int) -> float:
    if maximum == 0:
        return 0.0
    return total * 100 / maximum


def performance_tier(total: int, maximum: int) -> Tier:
    pct = percentage(total, maximum)
    for threshold, tier in TIER_THRESHOLDS:
        if pct >= threshold:
            return tier
    return Tier.BEGINNER


def summarize(history: Sequence[RoundRecord]) -> MatchSummary:
    total = total_score(history)
    maximum = max_possible(history)
    best = max(history, key=lambda r: r.score, default=None)
    worst = min(history, key=lambda r: r.score, default=None)
    return MatchSummary(
        total_score=total,
        max_possible=maximum,
        percentage=percentage(total, maximum),
        tier=performance_tier(total, maximum),
        rounds_played=len(history),
        floors_correct=sum(1 for r in history if r.floor_correct),
        perfect_rounds=sum(1 for r in history if r.score == MAX_LOCATION_SCORE),
        best_round=best.round_number if best else None,
        worst_round=worst.round_number if worst else None,
    )
