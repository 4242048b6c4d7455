"""Repository functions for the roadmaps table."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog
from supabase import Client

from pathwise.store.client import execute
from pathwise.store.models import Roadmap

logger = structlog.get_logger(__name__)

TABLE = "roadmaps"


def get_latest_roadmap(client: Client, user_id: str) -> Roadmap | None:
    """Get the user's most recently created roadmap."""
    response = execute(
        client.table(TABLE)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .limit(1),
        "roadmaps.latest",
    )
    rows = response.data or []
    return Roadmap.from_row(rows[0]) if rows else None


def get_roadmap(client: Client, roadmap_id: str) -> Roadmap | None:
    """Get a roadmap by ID."""
    response = execute(
        client.table(TABLE).select("*").eq("id", roadmap_id).limit(1),
        "roadmaps.get",
    )
    rows = response.data or []
    return Roadmap.from_row(rows[0]) if rows else None


def insert_roadmap(
    client: Client,
    user_id: str,
    title: str,
    goal: str,
    weeks: list[dict[str, Any]],
    questions: Any,
    answers: dict[str, Any],
) -> Roadmap | None:
    """Insert a roadmap and return the stored row.

    Returns:
        The created Roadmap, or None if the store returned no row
        (typically a row-level security misconfiguration)
    """
    response = execute(
        client.table(TABLE).insert(
            {
                "user_id": user_id,
                "title": title,
                "goal": goal,
                "weeks": weeks,
                "questions": questions,
                "answers": answers,
            }
        ),
        "roadmaps.insert",
    )
    rows = response.data or []
    if not rows:
        return None

    roadmap = Roadmap.from_row(rows[0])
    logger.debug("roadmaps.inserted", roadmap_id=roadmap.id, weeks=len(weeks))
    return roadmap


def update_roadmap_weeks(
    client: Client, roadmap_id: str, weeks: list[dict[str, Any]]
) -> None:
    """Replace a roadmap's weeks payload."""
    execute(
        client.table(TABLE)
        .update(
            {
                "weeks": weeks,
                "updated_at": datetime.now(timezone.utc).isoformat(),
            }
        )
        .eq("id", roadmap_id),
        "roadmaps.update_weeks",
    )
    logger.debug("roadmaps.weeks_updated", roadmap_id=roadmap_id, weeks=len(weeks))


def delete_roadmap(client: Client, roadmap_id: str) -> None:
    """Delete a roadmap (lessons and progress cascade in the store)."""
    execute(client.table(TABLE).delete().eq("id", roadmap_id), "roadmaps.delete")
    logger.debug("roadmaps.deleted", roadmap_id=roadmap_id)
