"""Repository functions for the lessons table."""

from __future__ import annotations

from typing import Any

import structlog
from supabase import Client

from pathwise.store.client import execute
from pathwise.store.models import Lesson

logger = structlog.get_logger(__name__)

TABLE = "lessons"


def get_lesson(client: Client, lesson_id: str) -> Lesson | None:
    """Get a lesson by ID."""
    response = execute(
        client.table(TABLE).select("*").eq("id", lesson_id).limit(1),
        "lessons.get",
    )
    rows = response.data or []
    return Lesson.from_row(rows[0]) if rows else None


def list_lessons(client: Client, roadmap_id: str) -> list[Lesson]:
    """List a roadmap's lessons ordered by week, then position in week."""
    response = execute(
        client.table(TABLE)
        .select("*")
        .eq("roadmap_id", roadmap_id)
        .order("week_number")
        .order("order_index"),
        "lessons.list",
    )
    return [Lesson.from_row(row) for row in response.data or []]


def insert_lessons(client: Client, rows: list[dict[str, Any]]) -> int:
    """Bulk insert lesson rows.

    Returns:
        Number of rows sent (0 means nothing was inserted)
    """
    if not rows:
        return 0
    execute(client.table(TABLE).insert(rows), "lessons.insert")
    logger.debug("lessons.inserted", count=len(rows), roadmap_id=rows[0].get("roadmap_id"))
    return len(rows)


def delete_lessons_for_roadmap(client: Client, roadmap_id: str) -> None:
    """Delete every lesson of a roadmap."""
    execute(
        client.table(TABLE).delete().eq("roadmap_id", roadmap_id),
        "lessons.delete_for_roadmap",
    )
    logger.debug("lessons.deleted_for_roadmap", roadmap_id=roadmap_id)


def set_lesson_content(client: Client, lesson_id: str, content: dict[str, Any]) -> None:
    """Persist generated content on the lesson row."""
    execute(
        client.table(TABLE).update({"content": content}).eq("id", lesson_id),
        "lessons.set_content",
    )
