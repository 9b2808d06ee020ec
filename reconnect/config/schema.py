"""
Configuration Schema

Pydantic models for validating Reconnect configuration.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field

from reconnect.config.defaults import (
    ACTIVITY_WINDOWS,
    LEADERBOARD_SIZE,
    RECENT_SESSION_WINDOW,
    TEAM_SESSION_MULTIPLIER,
)


class ReconnectConfig(BaseModel):
    """Top-level Reconnect configuration."""

    # Storage
    db_path: Optional[str] = None  # uses default if None

    # Scoring
    recent_session_window: int = Field(default=RECENT_SESSION_WINDOW, ge=1, le=50)
    team_multiplier: int = Field(default=TEAM_SESSION_MULTIPLIER, ge=1)

    # Admin
    leaderboard_size: int = Field(default=LEADERBOARD_SIZE, ge=1, le=100)
    activity_windows: List[int] = Field(default_factory=lambda: list(ACTIVITY_WINDOWS))

    # Output
    default_format: str = Field(default="text", pattern="^(text|json)$")

    def get_db_path(self) -> Path:
        if self.db_path:
            return Path(self.db_path)
        from reconnect.config.defaults import DEFAULT_DB_PATH
        return DEFAULT_DB_PATH
