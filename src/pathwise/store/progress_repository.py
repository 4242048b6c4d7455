"""Repository functions for the user_progress table.

One row per (user, roadmap); uniqueness is enforced by the store.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog
from supabase import Client

from pathwise.store.client import execute
from pathwise.store.models import UserProgress

logger = structlog.get_logger(__name__)

TABLE = "user_progress"


def get_progress(client: Client, user_id: str, roadmap_id: str) -> UserProgress | None:
    """Get the progress record of a user on a roadmap."""
    response = execute(
        client.table(TABLE)
        .select("*")
        .eq("user_id", user_id)
        .eq("roadmap_id", roadmap_id)
        .order("updated_at", desc=True)
        .limit(1),
        "user_progress.get",
    )
    rows = response.data or []
    return UserProgress.from_row(rows[0]) if rows else None


def list_progress_for_user(client: Client, user_id: str) -> list[UserProgress]:
    """List every progress record of a user."""
    response = execute(
        client.table(TABLE).select("*").eq("user_id", user_id),
        "user_progress.list_for_user",
    )
    return [UserProgress.from_row(row) for row in response.data or []]


def insert_progress(
    client: Client, user_id: str, roadmap_id: str, total_lessons: int
) -> None:
    """Create a zeroed progress record for a new roadmap."""
    execute(
        client.table(TABLE).insert(
            {
                "user_id": user_id,
                "roadmap_id": roadmap_id,
                "total_lessons": total_lessons,
                "completed_lessons": 0,
                "total_time_spent": 0,
                "average_accuracy": 0,
                "current_week": 1,
            }
        ),
        "user_progress.insert",
    )
    logger.debug("user_progress.inserted", roadmap_id=roadmap_id, total=total_lessons)


def update_progress_counters(client: Client, progress: UserProgress) -> None:
    """Write completed/time/accuracy counters of a progress record."""
    execute(
        client.table(TABLE)
        .update(
            {
                "completed_lessons": progress.completed_lessons,
                "total_time_spent": progress.total_time_spent,
                "average_accuracy": progress.average_accuracy,
            }
        )
        .eq("id", progress.id),
        "user_progress.update",
    )


def reset_progress_for_roadmap(client: Client, roadmap_id: str, total_lessons: int) -> None:
    """Zero the counters of every progress record on a roadmap."""
    execute(
        client.table(TABLE)
        .update(
            {
                "total_lessons": total_lessons,
                "completed_lessons": 0,
                "total_time_spent": 0,
                "average_accuracy": 0,
                "current_week": 1,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
        )
        .eq("roadmap_id", roadmap_id),
        "user_progress.reset",
    )
    logger.debug("user_progress.reset", roadmap_id=roadmap_id, total=total_lessons)
