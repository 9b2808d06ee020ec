"""
Score Engine

Computes the Reconnect Score from a user's session history:

- Base (recent quality): mean session quality of the most recent
  qualifying sessions (default 5)
- Consistency bonus: +5 for 3+ completed sessions this week, +10 for 5+
- Inactivity penalty: 5 points per day of absence beyond the second day,
  capped at 30

Final score = round(base + bonus - penalty), clamped to 0-100.

Two scales coexist here on purpose. Session quality and the Reconnect Score
are 0-100, while the calm/clarity/energy averages stay on the 1-10 rating
scale that the dashboard displays them on.
"""

import logging
from datetime import datetime
from typing import List, Optional

from reconnect.analyzers.streaks import current_streak
from reconnect.catalog.protocols import PROTOCOLS
from reconnect.config.defaults import (
    CONSISTENCY_TIERS,
    INACTIVITY_GRACE_DAYS,
    INACTIVITY_MAX_PENALTY_DAYS,
    INACTIVITY_POINTS_PER_DAY,
    RECENT_SESSION_WINDOW,
    SCORE_GOOD,
    SCORE_PEAK,
    SCORE_STRONG,
)
from reconnect.core.calendar import start_of_week, to_local, whole_days_between
from reconnect.core.models import (
    Protocol,
    Session,
    SessionQuality,
    UserStats,
    WellnessReport,
)
from reconnect.core.scoring import clamp, mean, round_half_up, session_quality

logger = logging.getLogger(__name__)


def compute_wellness(
    sessions: List[Session],
    now: datetime,
    window: int = RECENT_SESSION_WINDOW,
) -> WellnessReport:
    """
    Compute the Reconnect Score and its components.

    Args:
        sessions: One user's sessions, in any order.
        now: Evaluation time; "this week" and inactivity are relative to it.
        window: How many recent sessions feed the base score.

    Returns:
        WellnessReport. All zeros when no session qualifies.
    """
    qualifying = sorted(
        (s for s in sessions if s.is_scorable),
        key=lambda s: to_local(s.created_at, now),
        reverse=True,
    )
    if not qualifying:
        return WellnessReport()

    recent = [_to_quality(s) for s in qualifying[:window]]
    base_score = mean(q.quality for q in recent)

    weekly_sessions = count_this_week(sessions, now)
    bonus = consistency_bonus(weekly_sessions)

    days_since = max(0, whole_days_between(now, to_local(qualifying[0].created_at, now)))
    penalty = inactivity_penalty(days_since)

    score = int(clamp(round_half_up(base_score + bonus - penalty), 0, 100))

    logger.debug(
        "Reconnect score: base=%.1f bonus=%d penalty=%d (%d days idle) -> %d",
        base_score, bonus, penalty, days_since, score,
    )

    return WellnessReport(
        reconnect_score=score,
        session_qualities=recent,
        consistency_bonus=bonus,
        inactivity_penalty=penalty,
        days_since_last_session=days_since,
        calm_avg=round_half_up(mean(s.post_calm for s in qualifying)),
        clarity_avg=round_half_up(mean(s.post_clarity for s in qualifying)),
        energy_avg=round_half_up(mean(s.post_energy for s in qualifying)),
        base_score=base_score,
        weekly_sessions=weekly_sessions,
    )


def count_this_week(sessions: List[Session], now: datetime) -> int:
    """Completed sessions (ratings not required) since Sunday 00:00."""
    week_start = start_of_week(now)
    return sum(
        1 for s in sessions
        if s.completed and to_local(s.created_at, now) >= week_start
    )


def consistency_bonus(weekly_sessions: int) -> int:
    """Highest tier met; tiers do not stack."""
    bonus = 0
    for threshold, points in sorted(CONSISTENCY_TIERS):
        if weekly_sessions >= threshold:
            bonus = points
    return bonus


def inactivity_penalty(days_since_last_session: Optional[int]) -> int:
    if days_since_last_session is None or days_since_last_session <= INACTIVITY_GRACE_DAYS:
        return 0
    penalty_days = min(
        days_since_last_session - INACTIVITY_GRACE_DAYS,
        INACTIVITY_MAX_PENALTY_DAYS,
    )
    return penalty_days * INACTIVITY_POINTS_PER_DAY


def score_level(score: int) -> str:
    """Display label for a Reconnect Score."""
    if score >= SCORE_PEAK:
        return "Peak Performance"
    if score >= SCORE_STRONG:
        return "Strong Progress"
    if score >= SCORE_GOOD:
        return "Good Foundation"
    return "Building Momentum"


def compute_user_stats(
    sessions: List[Session],
    now: datetime,
    protocols: List[Protocol] = PROTOCOLS,
    window: int = RECENT_SESSION_WINDOW,
) -> UserStats:
    """Dashboard headline numbers: totals, completion rate, minutes, streak."""
    completed = [s for s in sessions if s.completed]
    durations = {p.id: p.duration for p in protocols}

    completion_rate = (
        round_half_up(len(completed) / len(sessions) * 100) if sessions else 0
    )

    return UserStats(
        total_sessions=len(completed),
        weekly_resets=count_this_week(sessions, now),
        completion_rate=completion_rate,
        total_minutes=sum(durations.get(s.protocol_id, 0) for s in completed),
        current_streak=current_streak(sessions, now),
        wellness=compute_wellness(sessions, now, window=window),
    )


def _to_quality(session: Session) -> SessionQuality:
    return SessionQuality(
        session_id=session.id,
        quality=session_quality(session),
        date=session.created_at,
        pre_calm=session.pre_calm,
        post_calm=session.post_calm,
        pre_clarity=session.pre_clarity,
        post_clarity=session.post_clarity,
        pre_energy=session.pre_energy,
        post_energy=session.post_energy,
    )
