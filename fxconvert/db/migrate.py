"""Database migration utilities.

Handles schema evolution by applying idempotent migrations keyed by an integer
`schema_version` stored in the metadata table.

Versions:
  1. initial users / sessions / conversion_history tables
  2. user_profiles.avatar_url + updated_at columns, history lookup index
"""

from __future__ import annotations
from pathlib import Path
import logging
import sqlite3
from typing import Optional, Set

from . import schema as schema_def
from .schema import init_db

CURRENT_SCHEMA_VERSION = 2
SCHEMA_VERSION_KEY = "schema_version"

logger = logging.getLogger("fxconvert.db")


def _get_schema_version(conn: sqlite3.Connection) -> Optional[int]:
    try:
        cur = conn.cursor()
        cur.execute("SELECT value FROM metadata WHERE key=?", (SCHEMA_VERSION_KEY,))
        row = cur.fetchone()
        if row:
            return int(row[0])
    except sqlite3.OperationalError:
        # metadata table may not exist yet (first run before init_db)
        return None
    return None


def apply_migrations(db_path: Path) -> int:
    """Apply required migrations and return resulting schema version."""
    init_db(db_path)
    conn = sqlite3.connect(db_path)
    try:
        version = _get_schema_version(conn) or 1
        if version < 2:
            _migrate_to_v2(conn)
            version = 2
            logger.info("migrated %s to schema version %s", db_path, version)
        _set_schema_version(conn, version)
        conn.commit()
        return version
    finally:
        conn.close()


def _set_schema_version(conn: sqlite3.Connection, version: int) -> None:
    cur = conn.cursor()
    cur.execute(
        "INSERT INTO metadata (key, value) VALUES (?, ?) "
        "ON CONFLICT(key) DO UPDATE SET value=excluded.value, "
        f"updated_at=({schema_def.BASIC_UTC_NOW})",
        (SCHEMA_VERSION_KEY, str(version)),
    )


def _table_columns(cur: sqlite3.Cursor, table: str) -> Set[str]:
    cur.execute(f"PRAGMA table_info({table})")
    return {row[1] for row in cur.fetchall()}


def _migrate_to_v2(conn: sqlite3.Connection) -> None:
    """Upgrade schema to version 2 (profile avatar + history index)."""
    cur = conn.cursor()
    try:
        columns = _table_columns(cur, "user_profiles")
        if "avatar_url" not in columns:
            cur.execute("ALTER TABLE user_profiles ADD COLUMN avatar_url TEXT")
        if "updated_at" not in columns:
            # ALTER TABLE cannot use a non-constant default; backfill instead
            cur.execute("ALTER TABLE user_profiles ADD COLUMN updated_at TEXT")
            cur.execute("UPDATE user_profiles SET updated_at = created_at")
        cur.execute(schema_def.HISTORY_USER_INDEX_DDL)
        conn.commit()
    except Exception:
        conn.rollback()
        raise
