import sqlite3

from fxconvert.db.migrate import CURRENT_SCHEMA_VERSION, apply_migrations


def _columns(path, table):
    conn = sqlite3.connect(path)
    try:
        return {row[1] for row in conn.execute(f"PRAGMA table_info({table})")}
    finally:
        conn.close()


def test_fresh_database_reaches_current_version(tmp_path):
    path = tmp_path / "fresh.sqlite3"
    assert apply_migrations(path) == CURRENT_SCHEMA_VERSION
    # Idempotent
    assert apply_migrations(path) == CURRENT_SCHEMA_VERSION
    assert {"avatar_url", "updated_at"} <= _columns(path, "user_profiles")


def test_v1_profiles_table_gains_new_columns(tmp_path):
    path = tmp_path / "legacy.sqlite3"
    conn = sqlite3.connect(path)
    conn.executescript(
        """
        CREATE TABLE user_profiles (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            created_at TEXT NOT NULL
        );
        INSERT INTO user_profiles VALUES ('u1', 'Old', 'old@example.org', '2025-01-01T00:00:00Z');
        CREATE TABLE metadata (key TEXT PRIMARY KEY, value TEXT NOT NULL, updated_at TEXT);
        INSERT INTO metadata (key, value) VALUES ('schema_version', '1');
        """
    )
    conn.commit()
    conn.close()

    assert apply_migrations(path) == 2
    assert {"avatar_url", "updated_at"} <= _columns(path, "user_profiles")
    conn = sqlite3.connect(path)
    try:
        row = conn.execute("SELECT name, updated_at FROM user_profiles WHERE id='u1'").fetchone()
    finally:
        conn.close()
    assert row == ("Old", "2025-01-01T00:00:00Z")
