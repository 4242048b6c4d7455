"""Repository functions for the lesson_completions table.

One row per (user, lesson); completing a lesson again overwrites it.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog
from supabase import Client

from pathwise.store.client import execute
from pathwise.store.models import LessonCompletion

logger = structlog.get_logger(__name__)

TABLE = "lesson_completions"
RECENT_LIMIT = 5


def get_completion(client: Client, user_id: str, lesson_id: str) -> LessonCompletion | None:
    """Get a user's completion of a lesson, if any."""
    response = execute(
        client.table(TABLE)
        .select("*")
        .eq("user_id", user_id)
        .eq("lesson_id", lesson_id)
        .limit(1),
        "lesson_completions.get",
    )
    rows = response.data or []
    return LessonCompletion.from_row(rows[0]) if rows else None


def upsert_completion(
    client: Client,
    user_id: str,
    lesson_id: str,
    score: int,
    time_spent: int,
    answers: Any,
) -> None:
    """Record (or overwrite) the completion of a lesson."""
    execute(
        client.table(TABLE).upsert(
            {
                "user_id": user_id,
                "lesson_id": lesson_id,
                "score": score,
                "time_spent": time_spent,
                "answers": answers,
                "completed_at": datetime.now(timezone.utc).isoformat(),
            },
            on_conflict="user_id,lesson_id",
        ),
        "lesson_completions.upsert",
    )
    logger.debug("lesson_completions.upserted", lesson_id=lesson_id, score=score)


def list_completions(client: Client, user_id: str) -> list[LessonCompletion]:
    """List every completion of a user."""
    response = execute(
        client.table(TABLE).select("*").eq("user_id", user_id),
        "lesson_completions.list",
    )
    return [LessonCompletion.from_row(row) for row in response.data or []]


def list_recent_completions(
    client: Client, user_id: str, roadmap_id: str, limit: int = RECENT_LIMIT
) -> list[LessonCompletion]:
    """List a user's latest completions on one roadmap, with lesson titles."""
    response = execute(
        client.table(TABLE)
        .select("*, lessons!inner(title, roadmap_id)")
        .eq("user_id", user_id)
        .eq("lessons.roadmap_id", roadmap_id)
        .order("completed_at", desc=True)
        .limit(limit),
        "lesson_completions.recent",
    )
    return [LessonCompletion.from_row(row) for row in response.data or []]
