from __future__ import annotations

import os
import sqlite3
import threading
from datetime import datetime, timezone

from app.core.config import settings

_conn: sqlite3.Connection | None = None
_conn_lock = threading.RLock()

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS conversations (
        id TEXT PRIMARY KEY,
        user_id TEXT,
        industry TEXT,
        current_step TEXT NOT NULL,
        business_profile_json TEXT,
        section_content_json TEXT NOT NULL DEFAULT '{}',
        messages_json TEXT NOT NULL DEFAULT '[]',
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """,
    """
    CREATE INDEX IF NOT EXISTS idx_conversations_user
    ON conversations (user_id, updated_at);
    """,
    """
    CREATE TABLE IF NOT EXISTS site_drafts (
        id TEXT PRIMARY KEY,
        session_id TEXT NOT NULL UNIQUE,
        business_profile_json TEXT NOT NULL DEFAULT '{}',
        content_json TEXT NOT NULL DEFAULT '{}',
        site_config_json TEXT NOT NULL DEFAULT '{}',
        status TEXT NOT NULL,
        slug TEXT UNIQUE,
        published_at TEXT,
        launch_preferences_json TEXT,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL
    );
    """,
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_connection() -> sqlite3.Connection:
    global _conn
    with _conn_lock:
        if _conn is not None:
            return _conn

        db_path = settings.database_path
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        _conn = sqlite3.connect(
            db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        _conn.row_factory = sqlite3.Row
        _conn.execute("PRAGMA journal_mode=WAL;")
        _conn.execute("PRAGMA synchronous=NORMAL;")
        _conn.execute("PRAGMA busy_timeout=5000;")
        for statement in _SCHEMA:
            _conn.execute(statement)
        return _conn


def connection_lock() -> threading.RLock:
    return _conn_lock


def init_db() -> None:
    get_connection()


def clear_all() -> None:
    conn = get_connection()
    with _conn_lock:
        conn.execute("DELETE FROM conversations")
        conn.execute("DELETE FROM site_drafts")
