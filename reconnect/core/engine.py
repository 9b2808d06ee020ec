"""
Reconnect Engine

Main orchestrator that ties the session repository to the scoring engines.
Every call re-fetches a snapshot and recomputes from scratch.
"""

import dataclasses
import logging
from datetime import datetime
from typing import Dict, List, Optional

from reconnect.analyzers import achievements, admin, recommendations, streaks, wellness
from reconnect.catalog.achievements import ACHIEVEMENTS
from reconnect.catalog.protocols import PROTOCOLS
from reconnect.config.schema import ReconnectConfig
from reconnect.core.errors import PolicyRecursionError, RepositoryError
from reconnect.core.models import (
    AchievementKind,
    AdminDashboard,
    HabitStats,
    Protocol,
    Session,
    UserAchievement,
    UserStats,
)
from reconnect.core.storage import SessionRepository

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class UserDashboard:
    """Everything the per-user dashboard shows, from one snapshot."""
    user_id: str
    generated_at: datetime
    stats: UserStats
    habits: HabitStats
    longest_streak: int
    recommendations: List[Protocol]
    suggestions: List[Protocol]
    achievements: List[UserAchievement]

    def to_dict(self) -> Dict:
        return {
            "user_id": self.user_id,
            "generated_at": self.generated_at.isoformat(),
            "stats": self.stats.to_dict(),
            "habits": self.habits.to_dict(),
            "longest_streak": self.longest_streak,
            "score_level": wellness.score_level(self.stats.wellness.reconnect_score),
            "recommendations": [p.to_dict() for p in self.recommendations],
            "suggestions": [p.to_dict() for p in self.suggestions],
            "achievements": [a.to_dict() for a in self.achievements],
        }


class ReconnectEngine:
    """Main orchestrator for the Reconnect scoring pipeline."""

    def __init__(
        self,
        repository: Optional[SessionRepository] = None,
        config: Optional[ReconnectConfig] = None,
        protocols: Optional[List[Protocol]] = None,
    ):
        self.config = config or ReconnectConfig()
        self.repository = repository or SessionRepository(self.config.get_db_path())
        self.protocols = protocols or PROTOCOLS
        self.achievement_catalog = [
            dataclasses.replace(a, team_multiplier=self.config.team_multiplier)
            if a.kind == AchievementKind.TEAM_MONTHLY else a
            for a in ACHIEVEMENTS
        ]

    # =========================================================================
    # Public API
    # =========================================================================

    def user_dashboard(self, user_id: str, now: Optional[datetime] = None) -> UserDashboard:
        """
        Run every per-user engine over one fresh snapshot.

        Args:
            user_id: Whose sessions to score.
            now: Evaluation time. Defaults to the current local time.

        Returns:
            UserDashboard. A failing repository yields the zeroed dashboard.
        """
        now = now or datetime.now().astimezone()
        sessions = self.fetch_sessions(user_id)
        logger.info("Scoring %d sessions for %s", len(sessions), user_id)

        stats = wellness.compute_user_stats(
            sessions, now, self.protocols, window=self.config.recent_session_window,
        )
        return UserDashboard(
            user_id=user_id,
            generated_at=now,
            stats=stats,
            habits=streaks.habit_stats(sessions, now),
            longest_streak=streaks.longest_streak(sessions, now),
            recommendations=recommendations.recommend(
                now.hour, stats.wellness.dimension_averages, self.protocols,
            ),
            suggestions=recommendations.suggest_from_history(sessions, now, self.protocols),
            achievements=achievements.evaluate(
                self.achievement_catalog, sessions, now, user_id, self.protocols,
            ),
        )

    def admin_dashboard(self, now: Optional[datetime] = None) -> AdminDashboard:
        """Cross-user rollups.

        Raises:
            PolicyRecursionError: the repository's access policy is
                misconfigured; the operator has to fix it.
        """
        now = now or datetime.now().astimezone()
        try:
            users = self.repository.list_all_users()
            sessions = self.repository.list_all_sessions()
        except PolicyRecursionError:
            logger.error("Admin data blocked by a recursive access policy")
            raise
        except RepositoryError as e:
            logger.warning("Admin data unavailable, showing empty dashboard: %s", e)
            return AdminDashboard.empty()

        try:
            return admin.aggregate(
                users,
                sessions,
                now,
                windows=self.config.activity_windows,
                protocols=self.protocols,
                leaderboard_size=self.config.leaderboard_size,
            )
        except PolicyRecursionError:
            raise
        except Exception as e:
            logger.warning("Admin rollups failed, showing empty dashboard: %s", e)
            return AdminDashboard.empty()

    def fetch_sessions(self, user_id: str, limit: Optional[int] = None) -> List[Session]:
        """A user's sessions, or an empty list if the repository fails."""
        try:
            return self.repository.list_sessions(user_id, limit=limit)
        except RepositoryError as e:
            logger.warning("Could not fetch sessions for %s: %s", user_id, e)
            return []

    def start_session(self, user_id: str, protocol_id: str,
                      pre_calm: int, pre_clarity: int, pre_energy: int,
                      now: Optional[datetime] = None) -> Session:
        if protocol_id not in {p.id for p in self.protocols}:
            raise ValueError(f"Unknown protocol: {protocol_id}")
        return self.repository.create_session(
            user_id, protocol_id, pre_calm, pre_clarity, pre_energy, created_at=now,
        )

    def complete_session(self, session_id: str,
                         post_calm: int, post_clarity: int, post_energy: int,
                         now: Optional[datetime] = None) -> Session:
        return self.repository.complete_session(
            session_id, post_calm, post_clarity, post_energy, completed_at=now,
        )
