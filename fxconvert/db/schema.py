"""Database schema DDL definitions and initialization utilities.

Tables:
  - users: credentials (email + password hash) and the name given at sign-up
  - user_profiles: display profile, created on first sign-in
  - auth_sessions: opaque session tokens with expiry
  - conversion_history: conversions saved for signed-in users
  - metadata: key/value store (schema version)
"""

from __future__ import annotations
import sqlite3
from typing import Sequence
from pathlib import Path

BASIC_UTC_NOW = "strftime('%Y-%m-%dT%H:%M:%fZ','now')"

USERS_DDL = f"""
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    password_hash TEXT NOT NULL,
    signup_name TEXT,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

USER_PROFILES_DDL = f"""
CREATE TABLE IF NOT EXISTS user_profiles (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT NOT NULL,
    avatar_url TEXT,
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (id) REFERENCES users(id) ON DELETE CASCADE
);
"""

AUTH_SESSIONS_DDL = f"""
CREATE TABLE IF NOT EXISTS auth_sessions (
    token TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    expires_at TEXT NOT NULL, -- ISO timestamp (UTC)
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);
"""

CONVERSION_HISTORY_DDL = f"""
CREATE TABLE IF NOT EXISTS conversion_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    from_currency TEXT NOT NULL,
    to_currency TEXT NOT NULL,
    from_amount REAL NOT NULL,
    to_amount REAL NOT NULL,
    exchange_rate REAL NOT NULL CHECK (exchange_rate > 0),
    created_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW}),
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);
"""

METADATA_DDL = f"""
CREATE TABLE IF NOT EXISTS metadata (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ({BASIC_UTC_NOW})
);
"""

SESSIONS_USER_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_auth_sessions_user ON auth_sessions(user_id);"
)
HISTORY_USER_INDEX_DDL = (
    "CREATE INDEX IF NOT EXISTS idx_history_user_created "
    "ON conversion_history(user_id, created_at);"
)

DDL_ORDER: Sequence[str] = (
    USERS_DDL,
    USER_PROFILES_DDL,
    AUTH_SESSIONS_DDL,
    CONVERSION_HISTORY_DDL,
    METADATA_DDL,
)


def init_db(path: Path) -> None:
    """Create all tables idempotently.

    Parameters
    ----------
    path: Path to SQLite database file.
    """
    conn = sqlite3.connect(path)
    try:
        cur = conn.cursor()
        for ddl in DDL_ORDER:
            cur.execute(ddl)
        _ensure_indexes(cur)
        conn.commit()
    finally:
        conn.close()


def _ensure_indexes(cur: sqlite3.Cursor) -> None:
    """Create indexes, tolerating legacy schemas missing indexed columns."""
    for ddl in (SESSIONS_USER_INDEX_DDL, HISTORY_USER_INDEX_DDL):
        try:
            cur.execute(ddl)
        except sqlite3.OperationalError:
            # Legacy tables may lack columns; migration handles re-creation.
            continue
