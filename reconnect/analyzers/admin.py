"""
Admin Aggregator

Cross-user rollups for the admin dashboard. Applies the per-user Score
Engine to every user and the shared session-quality math to every session,
grouped by company (email domain):

- Roster: per-user Reconnect Score, session count, badges
- Companies: active users, weekly/monthly actives, averages, sessions per user
- Global: daily activity and evolution series, score distribution,
  time-of-day split, protocol category usage, leaderboard
"""

import logging
from collections import OrderedDict
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from reconnect.analyzers.wellness import compute_wellness
from reconnect.catalog.protocols import PROTOCOLS, category_of
from reconnect.config.defaults import (
    ACTIVITY_WINDOWS,
    LEADERBOARD_SIZE,
    MONTHLY_ACTIVE_DAYS,
    WEEKLY_ACTIVE_DAYS,
)
from reconnect.core.calendar import to_local, trailing_days
from reconnect.core.models import (
    AdminDashboard,
    CompanyRollup,
    DayActivity,
    DayEvolution,
    Protocol,
    ProtocolCategory,
    Session,
    UserProfile,
    UserSummary,
)
from reconnect.core.scoring import (
    average_delta,
    mean,
    round_half_up,
    round_one_decimal,
    session_quality,
)

logger = logging.getLogger(__name__)

SCORE_BUCKETS = [("0-20", 20), ("21-40", 40), ("41-60", 60), ("61-80", 80), ("81-100", 100)]

# Display labels for protocol category usage, in display order
CATEGORY_LABELS = [
    (ProtocolCategory.RESET, "Quick Reset"),
    (ProtocolCategory.FOCUS, "Deep Focus"),
    (ProtocolCategory.ENERGY, "Energy Boost"),
    (ProtocolCategory.CALM, "Stress Relief"),
]

# (badge, predicate over (completed_count, all_count, score))
BADGES = [
    ("Dedicated User", lambda completed, total, score: completed >= 10),
    ("High Performer", lambda completed, total, score: score >= 80),
    ("Wellness Champion", lambda completed, total, score: total >= 20),
    ("Active Member", lambda completed, total, score: completed >= 5),
]


def aggregate(
    users: List[UserProfile],
    sessions: List[Session],
    now: datetime,
    windows: Sequence[int] = ACTIVITY_WINDOWS,
    protocols: List[Protocol] = PROTOCOLS,
    leaderboard_size: int = LEADERBOARD_SIZE,
) -> AdminDashboard:
    """
    Build the admin dashboard from a full users + sessions snapshot.

    Args:
        users: Roster (admins should already be excluded).
        sessions: Every user's sessions.
        now: Evaluation time; windows end today.
        windows: Day counts for the activity and evolution series.
        protocols: Catalog used to resolve protocol categories.
        leaderboard_size: How many companies the leaderboard keeps.

    Returns:
        AdminDashboard with every rollup populated.
    """
    by_user: Dict[str, List[Session]] = {}
    for s in sessions:
        by_user.setdefault(s.user_id, []).append(s)

    summaries = [summarize_user(u, by_user.get(u.id, []), now) for u in users]
    companies = rollup_companies(users, summaries, by_user, now)

    completed = [s for s in sessions if s.completed]
    scorable = [s for s in completed if s.is_scorable]

    active = sum(1 for u in summaries if u.session_count > 0)
    dashboard = AdminDashboard(
        users=summaries,
        companies=list(companies.values()),
        active_percentage=round_half_up(active / len(summaries) * 100) if summaries else 0,
        total_resets=len(completed),
        average_delta=round_one_decimal(mean(average_delta(s) for s in scorable)),
        average_score=round_half_up(mean(u.global_score for u in summaries)),
        activity={n: activity_series(completed, now, n) for n in windows},
        score_distribution=score_distribution(scorable),
        time_of_day=time_of_day(completed, now),
        category_usage=category_usage(completed, protocols),
        evolution={n: evolution_series(scorable, now, n) for n in windows},
        leaderboard=leaderboard(companies.values(), leaderboard_size),
        company_score_evolution=company_score_evolution(users, by_user, now, windows),
    )

    logger.info(
        "Aggregated %d users, %d companies, %d completed sessions",
        len(summaries), len(companies), len(completed),
    )
    return dashboard


# =============================================================================
# Roster and companies
# =============================================================================

def summarize_user(user: UserProfile, sessions: List[Session], now: datetime) -> UserSummary:
    completed = [s for s in sessions if s.completed]
    score = compute_wellness(sessions, now).reconnect_score
    badges = [
        name for name, earned in BADGES
        if earned(len(completed), len(sessions), score)
    ]
    last_active = max((to_local(s.created_at, now) for s in sessions), default=None)
    return UserSummary(
        user_id=user.id,
        email=user.email,
        company=user.company,
        session_count=len(completed),
        global_score=score,
        badges=badges,
        last_active=last_active,
        is_active=user.is_active,
    )


def rollup_companies(
    users: List[UserProfile],
    summaries: List[UserSummary],
    by_user: Dict[str, List[Session]],
    now: datetime,
) -> "OrderedDict[str, CompanyRollup]":
    """Company rollups keyed by domain, in first-seen order."""
    companies: "OrderedDict[str, CompanyRollup]" = OrderedDict()
    members: Dict[str, List[UserSummary]] = {}
    for summary in summaries:
        company = companies.setdefault(summary.company, CompanyRollup(name=summary.company))
        company.user_count += 1
        if summary.session_count > 0:
            company.active_users += 1
        company.total_sessions += summary.session_count
        members.setdefault(summary.company, []).append(summary)

    week_ago = now - timedelta(days=WEEKLY_ACTIVE_DAYS)
    month_ago = now - timedelta(days=MONTHLY_ACTIVE_DAYS)

    for name, company in companies.items():
        company_users = members[name]
        company.average_score = round_half_up(
            mean(u.global_score for u in company_users if u.session_count > 0)
        )

        company_sessions = [
            s for u in company_users for s in by_user.get(u.user_id, []) if s.completed
        ]
        company.weekly_active_users = len(_active_since(company_sessions, week_ago, now))
        company.monthly_active_users = len(_active_since(company_sessions, month_ago, now))

        rated = [s for s in company_sessions if s.has_post_ratings]
        company.average_calm = round_one_decimal(mean(s.post_calm for s in rated))
        company.average_clarity = round_one_decimal(mean(s.post_clarity for s in rated))
        company.average_energy = round_one_decimal(mean(s.post_energy for s in rated))
        company.average_sessions_per_user = (
            round_one_decimal(company.total_sessions / company.user_count)
            if company.user_count else 0.0
        )
    return companies


def leaderboard(companies: Iterable[CompanyRollup], size: int = LEADERBOARD_SIZE) -> List[Dict]:
    """Companies by total sessions, descending; ties keep roster order."""
    ranked = sorted(companies, key=lambda c: c.total_sessions, reverse=True)
    return [
        {"company": c.name, "total_sessions": c.total_sessions}
        for c in ranked[:size]
    ]


def _active_since(sessions: List[Session], since: datetime, now: datetime) -> set:
    return {s.user_id for s in sessions if to_local(s.created_at, now) >= since}


# =============================================================================
# Global series
# =============================================================================

def activity_series(completed: List[Session], now: datetime, days: int) -> List[DayActivity]:
    """Completed count and mean session quality per day, oldest first."""
    buckets = _bucket_by_day(completed, now)
    series = []
    for day in trailing_days(now, days):
        day_sessions = buckets.get(day.date(), [])
        qualities = [q for q in (session_quality(s) for s in day_sessions) if q is not None]
        series.append(DayActivity(
            label=_day_label(day, days),
            day=day,
            count=len(day_sessions),
            avg_score=round_half_up(mean(qualities)),
        ))
    return series


def evolution_series(scorable: List[Session], now: datetime, days: int) -> List[DayEvolution]:
    """Per-day mean calm/clarity/energy (1-10, one decimal) and mean quality."""
    buckets = _bucket_by_day(scorable, now)
    series = []
    for day in trailing_days(now, days):
        day_sessions = buckets.get(day.date(), [])
        series.append(DayEvolution(
            label=_day_label(day, days),
            day=day,
            calm=round_one_decimal(mean(s.post_calm for s in day_sessions)),
            clarity=round_one_decimal(mean(s.post_clarity for s in day_sessions)),
            energy=round_one_decimal(mean(s.post_energy for s in day_sessions)),
            score=round_half_up(mean(session_quality(s) for s in day_sessions)),
        ))
    return series


def company_score_evolution(
    users: List[UserProfile],
    by_user: Dict[str, List[Session]],
    now: datetime,
    windows: Sequence[int],
) -> Dict[str, Dict[int, List[int]]]:
    """Daily mean session quality per company, for each window."""
    company_sessions: "OrderedDict[str, List[Session]]" = OrderedDict()
    for user in users:
        scorable = [s for s in by_user.get(user.id, []) if s.is_scorable]
        company_sessions.setdefault(user.company, []).extend(scorable)

    return {
        company: {n: [d.score for d in evolution_series(sessions, now, n)] for n in windows}
        for company, sessions in company_sessions.items()
    }


def score_distribution(scorable: List[Session]) -> List[Dict]:
    """Individual session qualities in fixed 20-point buckets."""
    counts = [0] * len(SCORE_BUCKETS)
    for s in scorable:
        quality = session_quality(s)
        for i, (_, upper) in enumerate(SCORE_BUCKETS):
            if quality <= upper:
                counts[i] += 1
                break
    return [
        {"range": label, "count": count}
        for (label, _), count in zip(SCORE_BUCKETS, counts)
    ]


def time_of_day(completed: List[Session], now: datetime) -> Dict[str, int]:
    """Morning 05-11, afternoon 12-17, evening otherwise."""
    split = {"morning": 0, "afternoon": 0, "evening": 0}
    for s in completed:
        hour = to_local(s.created_at, now).hour
        if 5 <= hour <= 11:
            split["morning"] += 1
        elif 12 <= hour <= 17:
            split["afternoon"] += 1
        else:
            split["evening"] += 1
    return split


def category_usage(completed: List[Session], protocols: List[Protocol] = PROTOCOLS) -> List[Dict]:
    counts = {category: 0 for category, _ in CATEGORY_LABELS}
    for s in completed:
        category = _resolve_category(s.protocol_id, protocols)
        if category in counts:
            counts[category] += 1

    total = sum(counts.values()) or 1
    return [
        {
            "category": category.value,
            "label": label,
            "count": counts[category],
            "percent": round_half_up(counts[category] / total * 100),
        }
        for category, label in CATEGORY_LABELS
    ]


def _resolve_category(protocol_id: str, protocols: List[Protocol]) -> Optional[ProtocolCategory]:
    """Catalog lookup, falling back to a category name inside the id."""
    category = category_of(protocol_id, protocols)
    if category is not None:
        return category
    for candidate, _ in CATEGORY_LABELS:
        if candidate.value in (protocol_id or ""):
            return candidate
    return None


def _bucket_by_day(sessions: List[Session], now: datetime) -> Dict:
    buckets: Dict = {}
    for s in sessions:
        buckets.setdefault(to_local(s.created_at, now).date(), []).append(s)
    return buckets


def _day_label(day: datetime, window: int) -> str:
    return day.strftime("%a") if window <= 7 else day.strftime("%m-%d")
