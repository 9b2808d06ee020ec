"""
Reconnect Session Repository

SQLite-based storage at ~/.reconnect/reconnect.db
Append-only session log plus the user roster and runtime config.
"""

import logging
import sqlite3
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from reconnect.config.defaults import DEFAULT_DB_PATH, RATING_MAX, RATING_MIN
from reconnect.core.errors import (
    POLICY_RECURSION_CODE,
    PolicyRecursionError,
    RepositoryError,
    SessionStateError,
)
from reconnect.core.models import Session, UserProfile, UserRole

logger = logging.getLogger(__name__)

# SQLite messages that signal a self-referencing access rule
_RECURSION_MARKERS = (POLICY_RECURSION_CODE, "infinite recursion", "circularly defined")


def translate_error(exc: sqlite3.Error) -> RepositoryError:
    """Map a sqlite3 error onto the repository error taxonomy."""
    message = str(exc)
    if any(marker in message.lower() for marker in (m.lower() for m in _RECURSION_MARKERS)):
        return PolicyRecursionError()
    return RepositoryError(message)


class SessionRepository:
    """Local SQLite store for sessions and user profiles."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn: Optional[sqlite3.Connection] = None
        self._ensure_schema()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            try:
                self._conn = sqlite3.connect(str(self.db_path))
            except sqlite3.Error as e:
                raise translate_error(e) from e
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA journal_mode=WAL")
            self._conn.execute("PRAGMA foreign_keys=ON")
        return self._conn

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None

    # =========================================================================
    # Schema
    # =========================================================================

    def _ensure_schema(self):
        """Create tables if they don't exist."""
        with self.conn:
            self.conn.executescript("""
                CREATE TABLE IF NOT EXISTS profiles (
                    id TEXT PRIMARY KEY,
                    email TEXT UNIQUE NOT NULL,
                    full_name TEXT,
                    role TEXT NOT NULL DEFAULT 'user',
                    is_active INTEGER NOT NULL DEFAULT 1,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS sessions (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    protocol_id TEXT NOT NULL,
                    pre_calm INTEGER NOT NULL,
                    pre_clarity INTEGER NOT NULL,
                    pre_energy INTEGER NOT NULL,
                    post_calm INTEGER,
                    post_clarity INTEGER,
                    post_energy INTEGER,
                    completed INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    completed_at TEXT
                );

                CREATE TABLE IF NOT EXISTS config (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT DEFAULT (datetime('now'))
                );

                CREATE INDEX IF NOT EXISTS idx_sessions_user ON sessions(user_id, created_at);
                CREATE INDEX IF NOT EXISTS idx_sessions_created ON sessions(created_at);
            """)

    def _query(self, sql: str, params=()) -> List[sqlite3.Row]:
        try:
            return self.conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise translate_error(e) from e

    def _write(self, sql: str, params=()):
        try:
            with self.conn:
                return self.conn.execute(sql, params)
        except sqlite3.Error as e:
            raise translate_error(e) from e

    # =========================================================================
    # Users
    # =========================================================================

    def add_user(
        self,
        email: str,
        full_name: Optional[str] = None,
        role: UserRole = UserRole.USER,
        user_id: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ) -> UserProfile:
        profile = UserProfile(
            id=user_id or str(uuid.uuid4()),
            email=email,
            full_name=full_name,
            role=role,
            created_at=created_at or datetime.now(timezone.utc),
        )
        self._write(
            """INSERT INTO profiles (id, email, full_name, role, is_active, created_at)
               VALUES (?, ?, ?, ?, 1, ?)""",
            (profile.id, profile.email, profile.full_name,
             profile.role.value, profile.created_at.isoformat()),
        )
        return profile

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        rows = self._query("SELECT * FROM profiles WHERE id = ?", (user_id,))
        return _row_to_profile(rows[0]) if rows else None

    def find_user_by_email(self, email: str) -> Optional[UserProfile]:
        rows = self._query("SELECT * FROM profiles WHERE email = ?", (email,))
        return _row_to_profile(rows[0]) if rows else None

    def set_user_active(self, user_id: str, is_active: bool):
        self._write(
            "UPDATE profiles SET is_active = ? WHERE id = ?",
            (1 if is_active else 0, user_id),
        )

    def list_all_users(self) -> List[UserProfile]:
        """Non-admin profiles, newest first."""
        rows = self._query(
            "SELECT * FROM profiles WHERE role != ? ORDER BY julianday(created_at) DESC",
            (UserRole.ADMIN.value,),
        )
        return [_row_to_profile(r) for r in rows]

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(
        self,
        user_id: str,
        protocol_id: str,
        pre_calm: int,
        pre_clarity: int,
        pre_energy: int,
        created_at: Optional[datetime] = None,
    ) -> Session:
        """Start a session with its pre-session ratings."""
        for name, value in (("pre_calm", pre_calm), ("pre_clarity", pre_clarity),
                            ("pre_energy", pre_energy)):
            _check_rating(name, value)

        session = Session(
            id=str(uuid.uuid4()),
            user_id=user_id,
            protocol_id=protocol_id,
            pre_calm=pre_calm,
            pre_clarity=pre_clarity,
            pre_energy=pre_energy,
            created_at=created_at or datetime.now(timezone.utc),
        )
        self._write(
            """INSERT INTO sessions
               (id, user_id, protocol_id, pre_calm, pre_clarity, pre_energy,
                completed, created_at)
               VALUES (?, ?, ?, ?, ?, ?, 0, ?)""",
            (session.id, session.user_id, session.protocol_id,
             session.pre_calm, session.pre_clarity, session.pre_energy,
             session.created_at.isoformat()),
        )
        logger.info("Started session %s (%s) for %s", session.id, protocol_id, user_id)
        return session

    def complete_session(
        self,
        session_id: str,
        post_calm: int,
        post_clarity: int,
        post_energy: int,
        completed_at: Optional[datetime] = None,
    ) -> Session:
        """Record post-session ratings and mark the session completed, once."""
        for name, value in (("post_calm", post_calm), ("post_clarity", post_clarity),
                            ("post_energy", post_energy)):
            _check_rating(name, value)

        completed_at = completed_at or datetime.now(timezone.utc)
        cursor = self._write(
            """UPDATE sessions
               SET post_calm = ?, post_clarity = ?, post_energy = ?,
                   completed = 1, completed_at = ?
               WHERE id = ? AND completed = 0""",
            (post_calm, post_clarity, post_energy, completed_at.isoformat(), session_id),
        )
        if cursor.rowcount == 0:
            if self.get_session(session_id) is None:
                raise SessionStateError(f"Unknown session: {session_id}")
            raise SessionStateError(f"Session already completed: {session_id}")

        logger.info("Completed session %s", session_id)
        return self.get_session(session_id)

    def get_session(self, session_id: str) -> Optional[Session]:
        rows = self._query("SELECT * FROM sessions WHERE id = ?", (session_id,))
        return _row_to_session(rows[0]) if rows else None

    def list_sessions(self, user_id: str, limit: Optional[int] = None) -> List[Session]:
        """One user's sessions, most recent first."""
        query = "SELECT * FROM sessions WHERE user_id = ? ORDER BY julianday(created_at) DESC"
        params: list = [user_id]
        if limit:
            query += " LIMIT ?"
            params.append(limit)
        return [_row_to_session(r) for r in self._query(query, params)]

    def list_all_sessions(self) -> List[Session]:
        rows = self._query("SELECT * FROM sessions ORDER BY julianday(created_at) DESC")
        return [_row_to_session(r) for r in rows]

    # =========================================================================
    # Config
    # =========================================================================

    def get_config(self, key: str, default: Optional[str] = None) -> Optional[str]:
        rows = self._query("SELECT value FROM config WHERE key = ?", (key,))
        return rows[0][0] if rows else default

    def set_config(self, key: str, value: str):
        self._write(
            """INSERT OR REPLACE INTO config (key, value, updated_at)
               VALUES (?, ?, datetime('now'))""",
            (key, value),
        )

    def all_config(self) -> Dict[str, str]:
        return {r["key"]: r["value"] for r in self._query("SELECT key, value FROM config")}


def _check_rating(name: str, value: int):
    if not isinstance(value, int) or not RATING_MIN <= value <= RATING_MAX:
        raise ValueError(f"{name} must be an integer {RATING_MIN}-{RATING_MAX}, got {value!r}")


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _row_to_session(row: sqlite3.Row) -> Session:
    return Session(
        id=row["id"],
        user_id=row["user_id"],
        protocol_id=row["protocol_id"],
        pre_calm=row["pre_calm"],
        pre_clarity=row["pre_clarity"],
        pre_energy=row["pre_energy"],
        post_calm=row["post_calm"],
        post_clarity=row["post_clarity"],
        post_energy=row["post_energy"],
        completed=bool(row["completed"]),
        created_at=_parse_dt(row["created_at"]),
        completed_at=_parse_dt(row["completed_at"]),
    )


def _row_to_profile(row: sqlite3.Row) -> UserProfile:
    return UserProfile(
        id=row["id"],
        email=row["email"],
        full_name=row["full_name"],
        role=UserRole(row["role"]),
        is_active=bool(row["is_active"]),
        created_at=_parse_dt(row["created_at"]),
    )
