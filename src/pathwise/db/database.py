"""Local SQLite file backing the lesson content cache.

The hosted store is the source of truth for everything else; this file only
holds a key-value table so generated content survives restarts without a
round trip. Connections are short-lived: one per ``get_db()`` block.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_DB_PATH = Path("db/pathwise.db")

SCHEMA_VERSION = 1

# Seconds a writer waits on a locked file before failing
BUSY_TIMEOUT = 5.0

_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_cache (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""

# Set by init_db (and by tests pointing the cache at a temp file)
_db_path: Path | None = None


def get_db_path() -> Path:
    """Return the cache file currently in use."""
    return _db_path or DEFAULT_DB_PATH


def init_db(db_path: Path | None = None) -> None:
    """Select the cache file and make sure its table exists.

    Args:
        db_path: Cache file; ``db/pathwise.db`` under the working directory
            when omitted
    """
    global _db_path
    _db_path = Path(db_path) if db_path else DEFAULT_DB_PATH

    with get_db() as conn:
        version = conn.execute("PRAGMA user_version").fetchone()[0]

    logger.info("database.initialized", path=str(_db_path), schema_version=version)


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Open the cache file, commit on success and roll back on error.

    Example:
        with get_db() as conn:
            conn.execute("DELETE FROM kv_cache WHERE key = ?", (key,))
    """
    path = get_db_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(path, timeout=BUSY_TIMEOUT)
    conn.row_factory = sqlite3.Row
    try:
        _ensure_schema(conn)
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _ensure_schema(conn: sqlite3.Connection) -> None:
    if conn.execute("PRAGMA user_version").fetchone()[0] >= SCHEMA_VERSION:
        return
    conn.executescript(_SCHEMA)
    conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
