"""Tests for the ReconnectEngine orchestrator."""

from datetime import datetime, timedelta, timezone

import pytest

from reconnect.config.schema import ReconnectConfig
from reconnect.core.engine import ReconnectEngine
from reconnect.core.errors import PolicyRecursionError, RepositoryError
from reconnect.core.models import AdminDashboard, UserRole


class FailingRepository:
    """Stands in for a repository whose backend is down or misconfigured."""

    def __init__(self, error: RepositoryError):
        self.error = error

    def list_sessions(self, user_id, limit=None):
        raise self.error

    def list_all_users(self):
        raise self.error

    def list_all_sessions(self):
        raise self.error


class SnapshotRepository:
    """Serves a fixed roster and session list."""

    def __init__(self, users, sessions):
        self.users = users
        self.sessions = sessions

    def list_all_users(self):
        return list(self.users)

    def list_all_sessions(self):
        return list(self.sessions)


@pytest.fixture
def engine(repository):
    return ReconnectEngine(repository=repository)


def record(engine, user_id, protocol_id, pre, post, when):
    session = engine.start_session(user_id, protocol_id, *pre, now=when)
    return engine.complete_session(session.id, *post, now=when + timedelta(minutes=5))


class TestUserDashboard:
    def test_one_session_today(self, engine, now):
        record(engine, "u1", "peak-focus", (3, 3, 3), (8, 8, 8), now - timedelta(hours=1))
        dashboard = engine.user_dashboard("u1", now=now)

        assert dashboard.stats.wellness.reconnect_score == 65
        assert dashboard.stats.total_sessions == 1
        assert dashboard.habits.day_streak == 1
        assert dashboard.longest_streak == 1
        assert [p.id for p in dashboard.recommendations] == ["peak-focus", "reset-recharge"]
        assert len(dashboard.achievements) == 4

    def test_only_own_sessions(self, engine, now):
        record(engine, "u1", "peak-focus", (3, 3, 3), (8, 8, 8), now - timedelta(hours=1))
        record(engine, "u2", "peak-focus", (9, 9, 9), (1, 1, 1), now - timedelta(hours=1))
        assert engine.user_dashboard("u1", now=now).stats.wellness.reconnect_score == 65

    def test_unfinished_session_not_scored(self, engine, now):
        engine.start_session("u1", "peak-focus", 3, 3, 3, now=now - timedelta(hours=1))
        dashboard = engine.user_dashboard("u1", now=now)
        assert dashboard.stats.wellness.reconnect_score == 0
        assert dashboard.stats.completion_rate == 0

    def test_to_dict(self, engine, now):
        record(engine, "u1", "peak-focus", (3, 3, 3), (8, 8, 8), now - timedelta(hours=1))
        data = engine.user_dashboard("u1", now=now).to_dict()
        assert data["score_level"] == "Good Foundation"
        assert data["stats"]["wellness"]["reconnect_score"] == 65
        assert data["generated_at"] == now.isoformat()

    def test_failing_repository_gives_zeroed_dashboard(self, now):
        engine = ReconnectEngine(repository=FailingRepository(RepositoryError("down")))
        dashboard = engine.user_dashboard("u1", now=now)
        assert dashboard.stats.wellness.reconnect_score == 0
        assert dashboard.habits.day_streak == 0
        assert len(dashboard.recommendations) >= 2


class TestConfigWiring:
    def test_team_multiplier_from_config(self, repository, now):
        engine = ReconnectEngine(repository=repository, config=ReconnectConfig(team_multiplier=10))
        record(engine, "u1", "peak-focus", (3, 3, 3), (8, 8, 8), now - timedelta(hours=1))
        team = {a.achievement_id: a for a in engine.user_dashboard("u1", now=now).achievements}
        assert team["team-challenge"].progress == 10

    def test_recent_window_from_config(self, repository, now):
        engine = ReconnectEngine(repository=repository, config=ReconnectConfig(recent_session_window=1))
        record(engine, "u1", "peak-focus", (3, 3, 3), (8, 8, 8), now - timedelta(hours=2))
        record(engine, "u1", "peak-focus", (3, 3, 3), (8, 8, 8), now - timedelta(hours=1))
        report = engine.user_dashboard("u1", now=now).stats.wellness
        assert len(report.session_qualities) == 1


class TestSessionLifecycle:
    def test_unknown_protocol_rejected(self, engine):
        with pytest.raises(ValueError, match="Unknown protocol"):
            engine.start_session("u1", "no-such-protocol", 5, 5, 5)

    def test_fetch_sessions_limit(self, engine, now):
        for hours in (1, 2, 3):
            engine.start_session("u1", "peak-focus", 5, 5, 5, now=now - timedelta(hours=hours))
        assert len(engine.fetch_sessions("u1", limit=2)) == 2


class TestAdminDashboard:
    def test_aggregates_roster(self, engine, repository, now):
        user = repository.add_user("ana@acme.com")
        repository.add_user("boss@acme.com", role=UserRole.ADMIN)
        record(engine, user.id, "peak-focus", (3, 3, 3), (8, 8, 8), now - timedelta(hours=1))

        dashboard = engine.admin_dashboard(now=now)
        assert [u.email for u in dashboard.users] == ["ana@acme.com"]
        assert dashboard.total_resets == 1
        assert dashboard.companies[0].name == "acme.com"
        assert dashboard.average_score == 65

    def test_policy_recursion_propagates(self, now):
        engine = ReconnectEngine(repository=FailingRepository(PolicyRecursionError()))
        with pytest.raises(PolicyRecursionError, match="policy recursion"):
            engine.admin_dashboard(now=now)

    def test_other_failures_give_empty_dashboard(self, now):
        engine = ReconnectEngine(repository=FailingRepository(RepositoryError("timeout")))
        dashboard = engine.admin_dashboard(now=now)
        assert dashboard.to_dict() == AdminDashboard.empty().to_dict()

    def test_failing_aggregation_gives_empty_dashboard(self, engine, now, monkeypatch):
        def broken(*args, **kwargs):
            raise ValueError("bad bucket")

        monkeypatch.setattr("reconnect.analyzers.admin.aggregate", broken)
        dashboard = engine.admin_dashboard(now=now)
        assert dashboard.to_dict() == AdminDashboard.empty().to_dict()

    def test_policy_recursion_during_aggregation_propagates(self, engine, now, monkeypatch):
        def blocked(*args, **kwargs):
            raise PolicyRecursionError()

        monkeypatch.setattr("reconnect.analyzers.admin.aggregate", blocked)
        with pytest.raises(PolicyRecursionError):
            engine.admin_dashboard(now=now)

    def test_mixed_naive_and_aware_timestamps(self, make_user, make_session):
        now = datetime(2026, 10, 14, 10, 0, tzinfo=timezone.utc)
        naive = make_session(user_id="user-1", hour=8)
        aware = make_session(user_id="user-1", hour=9)
        aware.created_at = aware.created_at.replace(tzinfo=timezone.utc)
        engine = ReconnectEngine(repository=SnapshotRepository([make_user()], [naive, aware]))

        dashboard = engine.admin_dashboard(now=now)
        assert dashboard.total_resets == 2
        assert dashboard.users[0].global_score == 65


class TestDefaultClock:
    def test_omitted_now_uses_local_time(self, engine):
        session = engine.start_session("u1", "peak-focus", 3, 3, 3)
        engine.complete_session(session.id, 8, 8, 8)
        dashboard = engine.user_dashboard("u1")

        local_offset = datetime.now().astimezone().utcoffset()
        assert dashboard.generated_at.utcoffset() == local_offset
        assert dashboard.stats.total_sessions == 1
        assert dashboard.habits.day_streak == 1

    def test_omitted_now_on_admin_dashboard(self, engine, repository):
        user = repository.add_user("ana@acme.com")
        record(engine, user.id, "peak-focus", (3, 3, 3), (8, 8, 8),
               datetime.now().astimezone() - timedelta(minutes=10))
        assert engine.admin_dashboard().total_resets == 1
