"""Shared test fixtures for Reconnect."""

import itertools
from datetime import datetime, timedelta

import pytest

from reconnect.core.models import Session, UserProfile
from reconnect.core.storage import SessionRepository

# Wednesday 10:00; the week started Sunday 2026-10-11
NOW = datetime(2026, 10, 14, 10, 0)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_session(now):
    """Factory for Session objects with sensible defaults."""
    counter = itertools.count(1)

    def _make(
        days_ago=0,
        hour=None,
        minute=0,
        pre=(3, 3, 3),
        post=(8, 8, 8),
        completed=True,
        protocol_id="peak-focus",
        user_id="user-1",
        session_id=None,
    ):
        created = now - timedelta(days=days_ago)
        if hour is not None:
            created = created.replace(hour=hour, minute=minute)
        if not completed:
            post = (None, None, None)
        return Session(
            id=session_id or f"session-{next(counter):03d}",
            user_id=user_id,
            protocol_id=protocol_id,
            pre_calm=pre[0],
            pre_clarity=pre[1],
            pre_energy=pre[2],
            post_calm=post[0],
            post_clarity=post[1],
            post_energy=post[2],
            completed=completed,
            created_at=created,
            completed_at=created + timedelta(minutes=5) if completed else None,
        )

    return _make


@pytest.fixture
def make_user():
    """Factory for UserProfile objects."""

    def _make(user_id="user-1", email="alex@acme.com", is_active=True):
        return UserProfile(id=user_id, email=email, is_active=is_active)

    return _make


@pytest.fixture
def repository(tmp_path):
    """Repository backed by a temporary SQLite file."""
    repo = SessionRepository(db_path=tmp_path / "test.db")
    yield repo
    repo.close()
