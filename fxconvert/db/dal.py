"""Data Access Layer for users, sessions, profiles and conversion history.

Responsibilities
----------------
- Own every SQL statement; services receive plain dicts.
- Open a short-lived connection per call (commit on success, rollback on error).
- Keep email lookups case-insensitive by storing normalized addresses.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
import sqlite3
from typing import Any, Dict, Iterator, List, Optional

UTC_NOW_SQL = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"
_PROFILE_FIELDS = {"name", "avatar_url"}


def normalize_email(email: str) -> str:
    return email.strip().lower()


class Database:
    def __init__(self, db_path: Path):
        self.db_path = db_path

    # ------------------------------------------------------------------
    # Connection helpers
    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        conn = self._connect()
        try:
            yield conn.cursor()
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Users
    def create_user(
        self, user_id: str, email: str, password_hash: str, signup_name: Optional[str]
    ) -> Dict[str, Any]:
        """Insert a user; raises ValueError when the email is already registered."""
        try:
            with self._cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO users (id, email, password_hash, signup_name)
                    VALUES (?, ?, ?, ?)
                    """,
                    (user_id, normalize_email(email), password_hash, signup_name or None),
                )
                cur.execute("SELECT * FROM users WHERE id = ?", (user_id,))
                return dict(cur.fetchone())
        except sqlite3.IntegrityError as e:
            raise ValueError("email already registered") from e

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._cursor() as cur:
            cur.execute("SELECT * FROM users WHERE id = ?", (user_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        with self._cursor() as cur:
            cur.execute("SELECT * FROM users WHERE email = ?", (normalize_email(email),))
            row = cur.fetchone()
            return dict(row) if row else None

    # ------------------------------------------------------------------
    # Profiles
    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._cursor() as cur:
            cur.execute("SELECT * FROM user_profiles WHERE id = ?", (user_id,))
            row = cur.fetchone()
            return dict(row) if row else None

    def create_profile(self, user_id: str, name: str, email: str) -> Dict[str, Any]:
        with self._cursor() as cur:
            cur.execute(
                f"""
                INSERT INTO user_profiles (id, name, email, created_at, updated_at)
                VALUES (?, ?, ?, ({UTC_NOW_SQL}), ({UTC_NOW_SQL}))
                ON CONFLICT(id) DO NOTHING
                """,
                (user_id, name, email),
            )
            cur.execute("SELECT * FROM user_profiles WHERE id = ?", (user_id,))
            return dict(cur.fetchone())

    def update_profile(self, user_id: str, **fields: Any) -> Optional[Dict[str, Any]]:
        updates = {k: v for k, v in fields.items() if v is not None}
        unknown = set(updates) - _PROFILE_FIELDS
        if unknown:
            raise ValueError(f"unsupported profile fields: {sorted(unknown)}")
        if updates:
            assignments = ", ".join(f"{k} = ?" for k in updates)
            with self._cursor() as cur:
                cur.execute(
                    f"UPDATE user_profiles SET {assignments}, updated_at = ({UTC_NOW_SQL}) "
                    "WHERE id = ?",
                    (*updates.values(), user_id),
                )
        return self.get_profile(user_id)

    # ------------------------------------------------------------------
    # Sessions
    def create_session(self, token: str, user_id: str, expires_at: datetime) -> None:
        with self._cursor() as cur:
            cur.execute(
                "INSERT INTO auth_sessions (token, user_id, expires_at) VALUES (?, ?, ?)",
                (token, user_id, expires_at.isoformat()),
            )

    def get_session(self, token: str) -> Optional[Dict[str, Any]]:
        with self._cursor() as cur:
            cur.execute("SELECT * FROM auth_sessions WHERE token = ?", (token,))
            row = cur.fetchone()
            return dict(row) if row else None

    def delete_session(self, token: str) -> bool:
        with self._cursor() as cur:
            cur.execute("DELETE FROM auth_sessions WHERE token = ?", (token,))
            return cur.rowcount > 0

    def purge_expired_sessions(self, now: datetime) -> int:
        # ISO strings with a fixed +00:00 offset compare chronologically
        with self._cursor() as cur:
            cur.execute("DELETE FROM auth_sessions WHERE expires_at <= ?", (now.isoformat(),))
            return cur.rowcount

    # ------------------------------------------------------------------
    # Conversion history
    def insert_conversion(
        self,
        user_id: str,
        from_currency: str,
        to_currency: str,
        from_amount: float,
        to_amount: float,
        exchange_rate: float,
    ) -> Dict[str, Any]:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO conversion_history
                    (user_id, from_currency, to_currency, from_amount, to_amount, exchange_rate)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (user_id, from_currency, to_currency, from_amount, to_amount, exchange_rate),
            )
            new_id = cur.lastrowid
            cur.execute("SELECT * FROM conversion_history WHERE id = ?", (new_id,))
            return dict(cur.fetchone())

    def list_conversions(self, user_id: str, limit: int = 50) -> List[Dict[str, Any]]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT * FROM conversion_history
                WHERE user_id = ?
                ORDER BY created_at DESC, id DESC
                LIMIT ?
                """,
                (user_id, limit),
            )
            return [dict(r) for r in cur.fetchall()]
