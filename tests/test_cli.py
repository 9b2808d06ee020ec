"""Tests for the CLI using Click's test runner."""

import json
import re

import pytest
from click.testing import CliRunner

from reconnect.cli import cli
from reconnect.core.errors import PolicyRecursionError

UUID = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}")


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def db(tmp_path):
    return str(tmp_path / "cli.db")


def invoke(runner, db, *args):
    return runner.invoke(cli, ["--db", db, *args])


def record_session(runner, db, user="ana@acme.com"):
    started = invoke(runner, db, "start", "--user", user, "peak-focus", "3", "3", "3",
                     "--now", "2026-10-14T09:00:00")
    assert started.exit_code == 0, started.output
    session_id = UUID.search(started.output).group(0)
    completed = invoke(runner, db, "complete", session_id, "8", "8", "8",
                       "--now", "2026-10-14T09:05:00")
    assert completed.exit_code == 0, completed.output
    return session_id


class TestCLI:
    def test_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Reconnect" in result.output

    def test_add_user_prints_id(self, runner, db):
        result = invoke(runner, db, "add-user", "ana@acme.com", "--name", "Ana")
        assert result.exit_code == 0
        assert UUID.search(result.output)

    def test_duplicate_user_fails(self, runner, db):
        invoke(runner, db, "add-user", "ana@acme.com")
        result = invoke(runner, db, "add-user", "ana@acme.com")
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_score_after_session(self, runner, db):
        invoke(runner, db, "add-user", "ana@acme.com")
        record_session(runner, db)
        result = invoke(runner, db, "score", "--user", "ana@acme.com",
                        "--now", "2026-10-14T10:00:00")
        assert result.exit_code == 0
        assert "Reconnect Score: 65" in result.output

    def test_score_json(self, runner, db):
        invoke(runner, db, "add-user", "ana@acme.com")
        record_session(runner, db)
        result = invoke(runner, db, "score", "--user", "ana@acme.com",
                        "--now", "2026-10-14T10:00:00", "--format", "json")
        assert result.exit_code == 0
        data = json.loads(result.output[result.output.index("{"):])
        assert data["stats"]["wellness"]["reconnect_score"] == 65
        assert data["habits"]["day_streak"] == 1

    def test_unknown_email(self, runner, db):
        result = invoke(runner, db, "score", "--user", "ghost@acme.com")
        assert result.exit_code == 2

    def test_rating_out_of_range(self, runner, db):
        result = invoke(runner, db, "start", "--user", "u1", "peak-focus", "0", "5", "5")
        assert result.exit_code == 2

    def test_unknown_protocol(self, runner, db):
        result = invoke(runner, db, "start", "--user", "u1", "no-such", "5", "5", "5")
        assert result.exit_code == 1
        assert "Unknown protocol" in result.output

    def test_complete_twice(self, runner, db):
        session_id = record_session(runner, db, user="u1")
        result = invoke(runner, db, "complete", session_id, "5", "5", "5")
        assert result.exit_code == 1
        assert "already completed" in result.output

    def test_recommend_hour_override(self, runner, db):
        result = invoke(runner, db, "recommend", "--user", "u1", "--hour", "19",
                        "--now", "2026-10-14T10:00:00")
        assert result.exit_code == 0
        assert "Unplug & Recover" in result.output

    def test_streaks(self, runner, db):
        record_session(runner, db, user="u1")
        result = invoke(runner, db, "streaks", "--user", "u1", "--now", "2026-10-14T10:00:00")
        assert result.exit_code == 0
        assert "Current streak: 1" in result.output

    def test_achievements(self, runner, db):
        result = invoke(runner, db, "achievements", "--user", "u1")
        assert result.exit_code == 0
        assert "Team Challenge" in result.output

    def test_admin_empty(self, runner, db):
        result = invoke(runner, db, "admin")
        assert result.exit_code == 0
        assert "Users: 0" in result.output

    def test_admin_policy_recursion(self, runner, db, monkeypatch):
        def blocked(self, now=None):
            raise PolicyRecursionError()

        monkeypatch.setattr("reconnect.core.engine.ReconnectEngine.admin_dashboard", blocked)
        result = invoke(runner, db, "admin")
        assert result.exit_code == 2
        assert "policy recursion" in result.output

    def test_config_set_and_get(self, runner, db):
        assert invoke(runner, db, "config", "--key", "team", "--value", "acme").exit_code == 0
        result = invoke(runner, db, "config", "--key", "team")
        assert "team = acme" in result.output

    def test_config_no_args(self, runner, db):
        result = invoke(runner, db, "config")
        assert result.exit_code == 0
        assert "Configuration" in result.output
        assert "team_multiplier: 5" in result.output


class TestSavedConfig:
    def test_team_multiplier_applied(self, runner, db):
        invoke(runner, db, "config", "--key", "team_multiplier", "--value", "10")
        record_session(runner, db, user="u1")
        result = invoke(runner, db, "achievements", "--user", "u1",
                        "--now", "2026-10-14T10:00:00", "--format", "json")
        assert result.exit_code == 0
        data = json.loads(result.output[result.output.index("["):])
        team = next(a for a in data if a["achievement_id"] == "team-challenge")
        assert team["progress"] == 10

    def test_default_format(self, runner, db):
        invoke(runner, db, "config", "--key", "default_format", "--value", "json")
        result = invoke(runner, db, "streaks", "--user", "u1", "--now", "2026-10-14T10:00:00")
        assert result.exit_code == 0
        data = json.loads(result.output[result.output.index("{"):])
        assert data["day_streak"] == 0

    def test_invalid_saved_value(self, runner, db):
        invoke(runner, db, "config", "--key", "team_multiplier", "--value", "zero")
        result = invoke(runner, db, "score", "--user", "u1")
        assert result.exit_code == 1
        assert "invalid saved configuration" in result.output
