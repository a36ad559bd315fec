from __future__ import annotations

import enum
from dataclasses import dataclass


class ScoreRange(enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"


@dataclass(frozen=True)
class ScoreBounds:
    lower: float
    upper: float
    upper_inclusive: bool

    def contains(self, score: float) -> bool:
        if score < self.lower:
            return False
        return score <= self.upper if self.upper_inclusive else score < self.upper


_BOUNDS = {
    ScoreRange.low: ScoreBounds(1.0, 3.0, upper_inclusive=False),
    ScoreRange.medium: ScoreBounds(3.0, 4.0, upper_inclusive=False),
    ScoreRange.high: ScoreBounds(4.0, 5.0, upper_inclusive=True),
}


def score_range_bounds(score_range: ScoreRange | str) -> ScoreBounds:
    return _BOUNDS[ScoreRange(score_range)]


def bucket_score(score: float | None) -> ScoreRange | None:
    if score is None:
        return None
    for score_range, bounds in _BOUNDS.items():
        if bounds.contains(score):
            return score_range
    return None
