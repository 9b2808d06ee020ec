"""
Default Configuration

Centralized defaults for the Reconnect engine.
"""

from pathlib import Path

# Storage
DEFAULT_DB_DIR = Path.home() / ".reconnect"
DEFAULT_DB_PATH = DEFAULT_DB_DIR / "reconnect.db"

# Rating scale
RATING_MIN = 1
RATING_MAX = 10

# Reconnect Score
RECENT_SESSION_WINDOW = 5
CONSISTENCY_TIERS = [(3, 5), (5, 10)]  # (sessions this week, bonus points)
INACTIVITY_GRACE_DAYS = 2  # penalty starts on day 3
INACTIVITY_POINTS_PER_DAY = 5
INACTIVITY_MAX_PENALTY_DAYS = 6

# Score level thresholds
SCORE_PEAK = 85
SCORE_STRONG = 70
SCORE_GOOD = 55

# Recommendations
LOW_DIMENSION_THRESHOLD = 6
MIN_RECOMMENDATIONS = 2
MAX_RECOMMENDATIONS = 3

# Achievements
MORNING_CUTOFF_HOUR = 12
TEAM_SESSION_MULTIPLIER = 5  # stands in for a real team-wide count

# Habits
WEEKLY_GOAL_DAYS = 7
CONSISTENCY_WINDOW_DAYS = 30

# Admin
WEEKLY_ACTIVE_DAYS = 7
MONTHLY_ACTIVE_DAYS = 30
ACTIVITY_WINDOWS = (7, 30)
LEADERBOARD_SIZE = 10
