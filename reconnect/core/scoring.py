"""
Shared Scoring Primitives

Rounding, averaging, and per-session quality math shared by the per-user
Score Engine and the Admin Aggregator, so both report identical numbers.
"""

import math
from typing import Iterable, Optional

from reconnect.core.models import Session

# Weight of the absolute post-session level vs. the improvement over baseline
POST_LEVEL_WEIGHT = 0.5
IMPROVEMENT_WEIGHT = 0.5

# Ratings are collected on 1-10; session quality works on 0-100
RATING_SCALE = 10


def round_half_up(x: float) -> int:
    """Round .5 upward (JavaScript Math.round), not to the nearest even."""
    return int(math.floor(x + 0.5))


def round_one_decimal(x: float) -> float:
    return math.floor(x * 10 + 0.5) / 10


def clamp(x: float, low: float, high: float) -> float:
    return max(low, min(high, x))


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean; 0 for an empty input."""
    values = list(values)
    if not values:
        return 0.0
    return sum(values) / len(values)


def dimension_score(pre: int, post: int) -> float:
    """Score (0-100) for one of calm/clarity/energy.

    Half credit for the post-session level, half for non-negative
    improvement over baseline. A drop never penalizes.
    """
    post_level = post * RATING_SCALE
    improvement = max(0, post - pre) * RATING_SCALE
    return POST_LEVEL_WEIGHT * post_level + IMPROVEMENT_WEIGHT * improvement


def session_quality(session: Session) -> Optional[int]:
    """Quality (0-100) of a session, or None if it is not scorable."""
    if not session.is_scorable:
        return None
    scores = [
        dimension_score(session.pre_calm, session.post_calm),
        dimension_score(session.pre_clarity, session.post_clarity),
        dimension_score(session.pre_energy, session.post_energy),
    ]
    return int(clamp(round_half_up(mean(scores)), 0, 100))


def average_delta(session: Session) -> float:
    """Mean pre->post change across the three dimensions (may be negative)."""
    return (
        (session.post_calm - session.pre_calm)
        + (session.post_clarity - session.pre_clarity)
        + (session.post_energy - session.pre_energy)
    ) / 3
