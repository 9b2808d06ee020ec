"""
Reconnect Data Models

Core dataclasses and enums for the wellness scoring engine.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Any


# =============================================================================
# Enums
# =============================================================================

class ProtocolCategory(str, Enum):
    """Categories of guided audio protocols."""
    FOCUS = "focus"
    ENERGY = "energy"
    CALM = "calm"
    CLARITY = "clarity"
    RESET = "reset"


class Timeframe(str, Enum):
    """Window an achievement requirement is measured over."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class AchievementKind(str, Enum):
    """The closed set of achievement progress rules."""
    WEEKLY_COUNT = "weekly_count"
    CONSECUTIVE_MORNING = "consecutive_morning"
    WEEKLY_CATEGORY_COUNT = "weekly_category_count"
    TEAM_MONTHLY = "team_monthly"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


# =============================================================================
# Core Data Models
# =============================================================================

@dataclass
class Session:
    """One attempt at a protocol, with pre/post self-ratings (1-10)."""
    id: str
    user_id: str
    protocol_id: str
    pre_calm: Optional[int]
    pre_clarity: Optional[int]
    pre_energy: Optional[int]
    created_at: datetime
    post_calm: Optional[int] = None
    post_clarity: Optional[int] = None
    post_energy: Optional[int] = None
    completed: bool = False
    completed_at: Optional[datetime] = None

    @property
    def is_scorable(self) -> bool:
        """Completed with all six ratings present."""
        return self.completed and None not in (
            self.pre_calm, self.pre_clarity, self.pre_energy,
            self.post_calm, self.post_clarity, self.post_energy,
        )

    @property
    def has_post_ratings(self) -> bool:
        return None not in (self.post_calm, self.post_clarity, self.post_energy)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "protocol_id": self.protocol_id,
            "pre_calm": self.pre_calm,
            "pre_clarity": self.pre_clarity,
            "pre_energy": self.pre_energy,
            "post_calm": self.post_calm,
            "post_clarity": self.post_clarity,
            "post_energy": self.post_energy,
            "completed": self.completed,
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


@dataclass(frozen=True)
class Protocol:
    """A guided audio protocol from the static catalog."""
    id: str
    title: str
    category: ProtocolCategory
    duration: int  # minutes
    impact: Dict[str, int] = field(default_factory=dict)  # calm/clarity/energy percentages
    tagline: str = ""
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category.value,
            "duration": self.duration,
            "impact": dict(self.impact),
            "tagline": self.tagline,
        }


@dataclass(frozen=True)
class AchievementRequirements:
    count: int
    timeframe: Timeframe
    protocol_type: Optional[ProtocolCategory] = None
    consecutive: bool = False


@dataclass(frozen=True)
class Achievement:
    """A static achievement definition."""
    id: str
    title: str
    description: str
    badge: str
    kind: AchievementKind
    category: str
    requirements: AchievementRequirements
    team_multiplier: int = 1


@dataclass
class UserAchievement:
    """Progress on one achievement, recomputed on every evaluation."""
    user_id: str
    achievement_id: str
    progress: int = 0
    completed: bool = False
    completed_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "achievement_id": self.achievement_id,
            "progress": self.progress,
            "completed": self.completed,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


@dataclass
class UserProfile:
    """A member of the company roster."""
    id: str
    email: str
    full_name: Optional[str] = None
    role: UserRole = UserRole.USER
    is_active: bool = True
    created_at: Optional[datetime] = None

    @property
    def company(self) -> str:
        return self.email.split("@")[-1].lower()


# =============================================================================
# Score Engine Output Models
# =============================================================================

@dataclass
class SessionQuality:
    """Quality (0-100) of a single session, with its raw ratings for drill-down."""
    session_id: str
    quality: int
    date: datetime
    pre_calm: int
    post_calm: int
    pre_clarity: int
    post_clarity: int
    pre_energy: int
    post_energy: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "quality": self.quality,
            "date": self.date.isoformat(),
            "pre": [self.pre_calm, self.pre_clarity, self.pre_energy],
            "post": [self.post_calm, self.post_clarity, self.post_energy],
        }


@dataclass
class WellnessReport:
    """Reconnect Score and its components for one user."""
    reconnect_score: int = 0
    session_qualities: List[SessionQuality] = field(default_factory=list)
    consistency_bonus: int = 0
    inactivity_penalty: int = 0
    days_since_last_session: Optional[int] = None
    calm_avg: int = 0
    clarity_avg: int = 0
    energy_avg: int = 0
    base_score: float = 0.0
    weekly_sessions: int = 0

    @property
    def dimension_averages(self) -> Dict[str, int]:
        return {
            "calm": self.calm_avg,
            "clarity": self.clarity_avg,
            "energy": self.energy_avg,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "reconnect_score": self.reconnect_score,
            "base_score": round(self.base_score, 1),
            "consistency_bonus": self.consistency_bonus,
            "inactivity_penalty": self.inactivity_penalty,
            "days_since_last_session": self.days_since_last_session,
            "weekly_sessions": self.weekly_sessions,
            "averages": self.dimension_averages,
            "session_qualities": [q.to_dict() for q in self.session_qualities],
        }


@dataclass
class HabitStats:
    """Streak and consistency figures for the habits bar."""
    day_streak: int = 0
    personal_best: int = 0
    weekly_active_days: int = 0
    weekly_goal: int = 7
    monthly_consistency: int = 0  # percent of the trailing 30 days

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day_streak": self.day_streak,
            "personal_best": self.personal_best,
            "weekly_active_days": self.weekly_active_days,
            "weekly_goal": self.weekly_goal,
            "monthly_consistency": self.monthly_consistency,
        }


@dataclass
class UserStats:
    """Dashboard headline numbers for one user."""
    total_sessions: int = 0
    weekly_resets: int = 0
    completion_rate: int = 0
    total_minutes: int = 0
    current_streak: int = 0
    wellness: WellnessReport = field(default_factory=WellnessReport)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_sessions": self.total_sessions,
            "weekly_resets": self.weekly_resets,
            "completion_rate": self.completion_rate,
            "total_minutes": self.total_minutes,
            "current_streak": self.current_streak,
            "wellness": self.wellness.to_dict(),
        }


# =============================================================================
# Admin Output Models
# =============================================================================

@dataclass
class UserSummary:
    """Per-user row in the admin roster."""
    user_id: str
    email: str
    company: str
    session_count: int = 0
    global_score: int = 0
    badges: List[str] = field(default_factory=list)
    last_active: Optional[datetime] = None
    is_active: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "company": self.company,
            "session_count": self.session_count,
            "global_score": self.global_score,
            "badges": list(self.badges),
            "last_active": self.last_active.isoformat() if self.last_active else None,
            "is_active": self.is_active,
        }


@dataclass
class CompanyRollup:
    """Aggregates for one company (email domain)."""
    name: str
    user_count: int = 0
    active_users: int = 0
    total_sessions: int = 0
    average_score: int = 0
    weekly_active_users: int = 0
    monthly_active_users: int = 0
    average_calm: float = 0.0
    average_clarity: float = 0.0
    average_energy: float = 0.0
    average_sessions_per_user: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "user_count": self.user_count,
            "active_users": self.active_users,
            "total_sessions": self.total_sessions,
            "average_score": self.average_score,
            "weekly_active_users": self.weekly_active_users,
            "monthly_active_users": self.monthly_active_users,
            "average_calm": self.average_calm,
            "average_clarity": self.average_clarity,
            "average_energy": self.average_energy,
            "average_sessions_per_user": self.average_sessions_per_user,
        }


@dataclass
class DayActivity:
    label: str
    day: datetime
    count: int = 0
    avg_score: int = 0


@dataclass
class DayEvolution:
    label: str
    day: datetime
    calm: float = 0.0
    clarity: float = 0.0
    energy: float = 0.0
    score: int = 0


@dataclass
class AdminDashboard:
    """Cross-user rollups for the admin view."""
    users: List[UserSummary] = field(default_factory=list)
    companies: List[CompanyRollup] = field(default_factory=list)
    active_percentage: int = 0
    total_resets: int = 0
    average_delta: float = 0.0
    average_score: int = 0
    activity: Dict[int, List[DayActivity]] = field(default_factory=dict)
    score_distribution: List[Dict[str, Any]] = field(default_factory=list)
    time_of_day: Dict[str, int] = field(default_factory=dict)
    category_usage: List[Dict[str, Any]] = field(default_factory=list)
    evolution: Dict[int, List[DayEvolution]] = field(default_factory=dict)
    leaderboard: List[Dict[str, Any]] = field(default_factory=list)
    company_score_evolution: Dict[str, Dict[int, List[int]]] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "AdminDashboard":
        """Zeroed dashboard so the admin view always renders."""
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "users": [u.to_dict() for u in self.users],
            "companies": [c.to_dict() for c in self.companies],
            "active_percentage": self.active_percentage,
            "total_resets": self.total_resets,
            "average_delta": self.average_delta,
            "average_score": self.average_score,
            "activity": {
                str(n): [
                    {"label": d.label, "date": d.day.date().isoformat(),
                     "count": d.count, "avg_score": d.avg_score}
                    for d in days
                ]
                for n, days in self.activity.items()
            },
            "score_distribution": self.score_distribution,
            "time_of_day": self.time_of_day,
            "category_usage": self.category_usage,
            "evolution": {
                str(n): [
                    {"label": d.label, "date": d.day.date().isoformat(),
                     "calm": d.calm, "clarity": d.clarity,
                     "energy": d.energy, "score": d.score}
                    for d in days
                ]
                for n, days in self.evolution.items()
            },
            "leaderboard": self.leaderboard,
            "company_score_evolution": {
                company: {str(n): scores for n, scores in series.items()}
                for company, series in self.company_score_evolution.items()
            },
        }
