"""
Reconnect - Workplace Wellness Analytics

Scoring and analytics engine for guided wellness sessions.
Turns a stored session log into Reconnect Scores, streaks,
protocol recommendations, achievement progress, and admin rollups.
"""

__version__ = "0.1.0"
