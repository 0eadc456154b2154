"""SQLite schema for the local storage database."""

from __future__ import annotations

import sqlite3
from pathlib import Path

# Stored in PRAGMA user_version
_SCHEMA_VERSION = 1

_DDL = """
CREATE TABLE IF NOT EXISTS local_storage (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now', 'localtime'))
);
"""


def ensure_schema(db_path: str | Path) -> sqlite3.Connection:
    """Open the storage database at *db_path*, creating it if needed.

    The CLI and the web UI may hold the same file open, so the
    connection uses WAL and waits briefly on a locked database.
    """
    db_path = Path(db_path).expanduser()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path), timeout=5.0)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")

    (version,) = conn.execute("PRAGMA user_version").fetchone()
    if version < _SCHEMA_VERSION:
        conn.executescript(_DDL)
        conn.execute(f"PRAGMA user_version = {_SCHEMA_VERSION}")
        conn.commit()

    return conn
