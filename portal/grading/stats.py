"""Statistics over the attempts of a single quiz."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable

from portal.grading.engine import percentage

PASS_THRESHOLD = 60
EXCELLENT_FLOOR = 90
GOOD_FLOOR = 80
AVERAGE_FLOOR = 70


@dataclass(slots=True)
class ScoreDistribution:
    excellent: int = 0
    good: int = 0
    average: int = 0
    poor: int = 0

    def add(self, score: int) -> None:
        if score >= EXCELLENT_FLOOR:
            self.excellent += 1
        elif score >= GOOD_FLOOR:
            self.good += 1
        elif score >= AVERAGE_FLOOR:
            self.average += 1
        else:
            self.poor += 1

    def total(self) -> int:
        return self.excellent + self.good + self.average + self.poor


@dataclass(slots=True)
class QuizStats:
    total_attempts: int = 0
    average_score: int = 0
    highest_score: int = 0
    lowest_score: int = 0
    pass_rate: int = 0
    score_distribution: ScoreDistribution = field(default_factory=ScoreDistribution)

    def as_dict(self) -> dict:
        return {
            "totalAttempts": self.total_attempts,
            "averageScore": self.average_score,
            "highestScore": self.highest_score,
            "lowestScore": self.lowest_score,
            "passRate": self.pass_rate,
            "scoreDistribution": {
                "excellent": self.score_distribution.excellent,
                "good": self.score_distribution.good,
                "average": self.score_distribution.average,
                "poor": self.score_distribution.poor,
            },
        }


def _score_of(attempt: Any) -> int:
    raw = attempt if isinstance(attempt, (int, float)) else attempt.score
    # Rounded half up, as percentage() does
    return max(0, min(100, math.floor(raw + 0.5)))


def aggregate_stats(attempts: Iterable[Any]) -> QuizStats:
    """Summarise attempt scores: mean, extremes, pass rate and distribution.

    Each attempt is anything with a ``score`` attribute, or a bare number.
    An empty collection gives all-zero statistics.
    """
    scores = [_score_of(a) for a in attempts]
    stats = QuizStats(total_attempts=len(scores))
    if not scores:
        return stats

    # percentage(total, n * 100) == mean rounded half up
    stats.average_score = percentage(sum(scores), len(scores) * 100)
    stats.highest_score = max(scores)
    stats.lowest_score = min(scores)
    stats.pass_rate = percentage(sum(1 for s in scores if s >= PASS_THRESHOLD), len(scores))
    for score in scores:
        stats.score_distribution.add(score)
    return stats
