"""
Achievement Evaluator

Recomputes every achievement from the session log on each call. There is no
stored progress, so ``completed_at`` is the evaluation time whenever the
threshold is met and will differ between calls.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List

from reconnect.catalog.achievements import ACHIEVEMENTS
from reconnect.catalog.protocols import PROTOCOLS, category_of
from reconnect.config.defaults import MORNING_CUTOFF_HOUR
from reconnect.core.calendar import (
    start_of_month,
    start_of_week,
    to_local,
    whole_days_between,
)
from reconnect.core.models import (
    Achievement,
    AchievementKind,
    Protocol,
    Session,
    UserAchievement,
)

logger = logging.getLogger(__name__)


def evaluate(
    catalog: List[Achievement],
    sessions: List[Session],
    now: datetime,
    user_id: str,
    protocols: List[Protocol] = PROTOCOLS,
) -> List[UserAchievement]:
    """
    Compute progress for every achievement in the catalog.

    Args:
        catalog: Achievement definitions, evaluated in order.
        sessions: One user's sessions.
        now: Evaluation time.
        user_id: Owner of the sessions.
        protocols: Catalog used to resolve protocol categories.

    Returns:
        One UserAchievement per catalog entry.
    """
    results = []
    for achievement in catalog:
        rule = _RULES.get(achievement.kind)
        progress = rule(achievement, sessions, now, protocols) if rule else 0
        completed = progress >= achievement.requirements.count
        results.append(UserAchievement(
            user_id=user_id,
            achievement_id=achievement.id,
            progress=progress,
            completed=completed,
            completed_at=now if completed else None,
        ))
    logger.debug(
        "Achievements for %s: %d/%d completed",
        user_id, sum(1 for r in results if r.completed), len(results),
    )
    return results


def evaluate_default(sessions: List[Session], now: datetime, user_id: str) -> List[UserAchievement]:
    return evaluate(ACHIEVEMENTS, sessions, now, user_id)


# =============================================================================
# Progress rules, one per AchievementKind
# =============================================================================

def _weekly_count(achievement, sessions, now, protocols) -> int:
    week_start = start_of_week(now)
    return sum(
        1 for s in sessions
        if s.completed and to_local(s.created_at, now) >= week_start
    )


def _consecutive_morning(achievement, sessions, now, protocols) -> int:
    """Longest run of mornings, one day apart, using the required category."""
    category = achievement.requirements.protocol_type
    times = sorted(
        (
            to_local(s.created_at, now) for s in sessions
            if s.completed and category_of(s.protocol_id, protocols) == category
        ),
        reverse=True,
    )
    mornings = [t for t in times if t.hour < MORNING_CUTOFF_HOUR]

    best = run = 0
    for i, t in enumerate(mornings):
        if i == 0 or whole_days_between(mornings[i - 1], t) != 1:
            run = 1
        else:
            run += 1
        best = max(best, run)
    return best


def _weekly_category_count(achievement, sessions, now, protocols) -> int:
    category = achievement.requirements.protocol_type
    week_start = start_of_week(now)
    return sum(
        1 for s in sessions
        if s.completed
        and category_of(s.protocol_id, protocols) == category
        and to_local(s.created_at, now) >= week_start
    )


def _team_monthly(achievement, sessions, now, protocols) -> int:
    # Placeholder: scales one user's count instead of querying the team.
    month_start = start_of_month(now)
    monthly = sum(
        1 for s in sessions
        if s.completed and to_local(s.created_at, now) >= month_start
    )
    return min(monthly * achievement.team_multiplier, achievement.requirements.count)


_RULES: Dict[AchievementKind, Callable[..., int]] = {
    AchievementKind.WEEKLY_COUNT: _weekly_count,
    AchievementKind.CONSECUTIVE_MORNING: _consecutive_morning,
    AchievementKind.WEEKLY_CATEGORY_COUNT: _weekly_category_count,
    AchievementKind.TEAM_MONTHLY: _team_monthly,
}
