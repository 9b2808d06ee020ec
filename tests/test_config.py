"""Tests for configuration schema and defaults."""

import pytest
from pydantic import ValidationError

from reconnect.config.defaults import (
    ACTIVITY_WINDOWS,
    CONSISTENCY_TIERS,
    INACTIVITY_GRACE_DAYS,
    INACTIVITY_MAX_PENALTY_DAYS,
    INACTIVITY_POINTS_PER_DAY,
    RECENT_SESSION_WINDOW,
    SCORE_GOOD,
    SCORE_PEAK,
    SCORE_STRONG,
    TEAM_SESSION_MULTIPLIER,
)
from reconnect.config.schema import ReconnectConfig


class TestDefaults:
    def test_score_level_ordering(self):
        assert SCORE_PEAK > SCORE_STRONG > SCORE_GOOD

    def test_recent_window(self):
        assert RECENT_SESSION_WINDOW == 5

    def test_max_penalty_is_thirty(self):
        assert INACTIVITY_MAX_PENALTY_DAYS * INACTIVITY_POINTS_PER_DAY == 30
        assert INACTIVITY_GRACE_DAYS == 2

    def test_consistency_tiers(self):
        assert sorted(CONSISTENCY_TIERS) == [(3, 5), (5, 10)]

    def test_activity_windows(self):
        assert tuple(ACTIVITY_WINDOWS) == (7, 30)


class TestReconnectConfig:
    def test_defaults(self):
        config = ReconnectConfig()
        assert config.recent_session_window == RECENT_SESSION_WINDOW
        assert config.team_multiplier == TEAM_SESSION_MULTIPLIER
        assert config.activity_windows == [7, 30]
        assert config.default_format == "text"

    def test_window_validation(self):
        with pytest.raises(ValidationError):
            ReconnectConfig(recent_session_window=0)
        with pytest.raises(ValidationError):
            ReconnectConfig(recent_session_window=51)

    def test_multiplier_validation(self):
        with pytest.raises(ValidationError):
            ReconnectConfig(team_multiplier=0)

    def test_format_validation(self):
        with pytest.raises(ValidationError):
            ReconnectConfig(default_format="xml")

    def test_get_db_path_default(self):
        path = ReconnectConfig().get_db_path()
        assert path.name == "reconnect.db"
        assert ".reconnect" in str(path)

    def test_get_db_path_custom(self):
        config = ReconnectConfig(db_path="/tmp/custom.db")
        assert str(config.get_db_path()) == "/tmp/custom.db"
