"""Database initialization and connection management."""
import os
import sqlite3
from pathlib import Path

APP_HOME = Path(os.environ.get("HIFZ_TUTOR_HOME", Path.home() / ".hifz_tutor"))
DEFAULT_DB_PATH = os.environ.get("HIFZ_TUTOR_DB", str(APP_HOME / "tutor.db"))

SCHEMA = """
CREATE TABLE IF NOT EXISTS documents (
    slug TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    number INTEGER NOT NULL,
    verses TEXT NOT NULL,
    source TEXT DEFAULT 'seeded'
);

CREATE TABLE IF NOT EXISTS sessions (
    id TEXT NOT NULL,
    account_id TEXT NOT NULL,
    completed_at INTEGER NOT NULL,
    document_slug TEXT NOT NULL,
    document_name TEXT,
    document_number INTEGER,
    range_start INTEGER NOT NULL,
    range_end INTEGER NOT NULL,
    repetitions INTEGER NOT NULL DEFAULT 1,
    mode TEXT NOT NULL,
    correct_count INTEGER NOT NULL DEFAULT 0,
    total_count INTEGER NOT NULL DEFAULT 0,
    percent REAL NOT NULL DEFAULT 0,
    attempts TEXT NOT NULL DEFAULT '[]',
    focus_mode TEXT,
    hide_policy TEXT,
    PRIMARY KEY (account_id, id)
);

CREATE INDEX IF NOT EXISTS idx_sessions_account_time ON sessions(account_id, completed_at);

CREATE TABLE IF NOT EXISTS user_settings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    key TEXT NOT NULL UNIQUE,
    value TEXT
);
"""


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory and foreign keys enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating all tables if they don't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()
