"""
Streak Calculator

Consecutive-day statistics over a user's completed sessions. Callers must
pass one user's sessions; nothing here filters by user.
"""

from datetime import date, datetime, timedelta
from typing import List, Set

from reconnect.config.defaults import CONSISTENCY_WINDOW_DAYS, WEEKLY_GOAL_DAYS
from reconnect.core.calendar import local_date, start_of_week, to_local
from reconnect.core.models import HabitStats, Session
from reconnect.core.scoring import round_half_up


def _session_dates(sessions: List[Session], now: datetime) -> Set[date]:
    """Local calendar dates with at least one completed session."""
    return {local_date(s.created_at, now) for s in sessions if s.completed}


def current_streak(sessions: List[Session], now: datetime) -> int:
    """Consecutive days with a completed session, counting back from today.

    A day without a session today means a streak of 0, even if yesterday
    had one.
    """
    dates = _session_dates(sessions, now)
    streak = 0
    day = now.date()
    while day in dates:
        streak += 1
        day -= timedelta(days=1)
    return streak


def longest_streak(sessions: List[Session], now: datetime) -> int:
    """Longest run of calendar-consecutive days with a completed session."""
    dates = _session_dates(sessions, now)
    if not dates:
        return 0

    ordered = sorted(dates)
    best = run = 1
    for prev, cur in zip(ordered, ordered[1:]):
        if (cur - prev).days == 1:
            run += 1
        else:
            run = 1
        best = max(best, run)
    return best


def habit_stats(sessions: List[Session], now: datetime) -> HabitStats:
    """Streaks plus weekly and monthly consistency for the habits bar."""
    day_streak = current_streak(sessions, now)
    week_start = start_of_week(now)
    window_start = now - timedelta(days=CONSISTENCY_WINDOW_DAYS)

    weekly_days = set()
    monthly_days = set()
    for s in sessions:
        if not s.completed:
            continue
        created = to_local(s.created_at, now)
        if created >= week_start:
            weekly_days.add(created.date())
        if created >= window_start:
            monthly_days.add(created.date())

    return HabitStats(
        day_streak=day_streak,
        personal_best=max(longest_streak(sessions, now), day_streak),
        weekly_active_days=len(weekly_days),
        weekly_goal=WEEKLY_GOAL_DAYS,
        monthly_consistency=round_half_up(len(monthly_days) / CONSISTENCY_WINDOW_DAYS * 100),
    )
