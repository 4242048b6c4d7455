"""Local cache of generated lesson content.

Entries are keyed ``lesson_{lesson_id}`` and never expire; clearing is
manual (``pathwise cache clear``).
"""

from __future__ import annotations

import json
from typing import Any

import structlog

from pathwise.db.database import get_db

logger = structlog.get_logger(__name__)

KEY_PREFIX = "lesson_"


def cache_key(lesson_id: str) -> str:
    return f"{KEY_PREFIX}{lesson_id}"


def get_cached_lesson_content(lesson_id: str) -> dict[str, Any] | None:
    """Get cached content for a lesson.

    Returns:
        Content dict, or None if absent or unreadable
    """
    with get_db() as conn:
        row = conn.execute(
            "SELECT value FROM kv_cache WHERE key = ?", (cache_key(lesson_id),)
        ).fetchone()

    if row is None:
        return None

    try:
        content = json.loads(row["value"])
    except json.JSONDecodeError:
        logger.warning("lesson_cache.corrupt_entry", lesson_id=lesson_id)
        return None

    return content if isinstance(content, dict) else None


def cache_lesson_content(lesson_id: str, content: dict[str, Any]) -> None:
    """Store (or overwrite) content for a lesson."""
    with get_db() as conn:
        conn.execute(
            """
            INSERT INTO kv_cache (key, value, updated_at)
            VALUES (?, ?, datetime('now'))
            ON CONFLICT(key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
            """,
            (cache_key(lesson_id), json.dumps(content, ensure_ascii=False)),
        )
    logger.debug("lesson_cache.stored", lesson_id=lesson_id)


def list_cache_keys() -> list[str]:
    """List cached lesson keys, oldest first."""
    with get_db() as conn:
        rows = conn.execute(
            "SELECT key FROM kv_cache WHERE key LIKE ? ORDER BY updated_at, key",
            (f"{KEY_PREFIX}%",),
        ).fetchall()
    return [row["key"] for row in rows]


def clear_lesson_cache(lesson_id: str | None = None) -> int:
    """Remove cached content.

    Args:
        lesson_id: Only remove this lesson's entry; all entries if None

    Returns:
        Number of entries removed
    """
    with get_db() as conn:
        if lesson_id is None:
            cursor = conn.execute(
                "DELETE FROM kv_cache WHERE key LIKE ?", (f"{KEY_PREFIX}%",)
            )
        else:
            cursor = conn.execute(
                "DELETE FROM kv_cache WHERE key = ?", (cache_key(lesson_id),)
            )
        removed = cursor.rowcount

    logger.info("lesson_cache.cleared", lesson_id=lesson_id, removed=removed)
    return removed
