"""Roadmap management: view, delete, alter."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any

import structlog
from supabase import Client

from pathwise.config.app_config import load_app_config
from pathwise.core.auth import AuthUser
from pathwise.core.errors import PathwiseError, ValidationError
from pathwise.core.notifications import NotificationCenter
from pathwise.core.progress import overall_progress, week_progress
from pathwise.core.roadmap_generator import alter_roadmap_weeks, lessons_from_weeks
from pathwise.llm.client import LLMClient
from pathwise.store import (
    completions_repository,
    lessons_repository,
    progress_repository,
    roadmaps_repository,
)
from pathwise.store.models import Lesson, LessonCompletion, Roadmap
from pathwise.utils.async_utils import run_blocking

logger = structlog.get_logger(__name__)


@dataclass
class RoadmapView:
    """Latest roadmap with lessons and completion figures (empty if none)."""

    roadmap: Roadmap | None = None
    lessons: list[Lesson] = field(default_factory=list)
    completions: list[LessonCompletion] = field(default_factory=list)

    @property
    def overall_progress(self) -> int:
        return overall_progress(self.lessons, self.completions)

    def week_progress(self, week_number: int) -> int:
        return week_progress(self.lessons, self.completions, week_number)

    def to_dict(self) -> dict[str, Any]:
        if self.roadmap is None:
            return {"roadmap": None, "weeks": [], "overall_progress": 0}

        done = {c.lesson_id for c in self.completions}
        weeks = []
        for index, week in enumerate(self.roadmap.weeks):
            number = index + 1
            weeks.append(
                {
                    "week_number": number,
                    "title": _week_title(week, number),
                    "progress": self.week_progress(number),
                    "lessons": [
                        {**lesson.to_dict(), "completed": lesson.id in done}
                        for lesson in self.lessons
                        if lesson.week_number == number
                    ],
                }
            )

        return {
            "roadmap": self.roadmap.to_dict(),
            "weeks": weeks,
            "overall_progress": self.overall_progress,
            "completed_lessons": len(self.completions),
            "total_lessons": len(self.lessons),
        }


def _week_title(week: Any, number: int) -> str:
    if isinstance(week, dict) and week.get("title"):
        return str(week["title"])
    return f"Week {number}"


async def load_roadmap_view(client: Client, user: AuthUser) -> RoadmapView:
    """Load the user's latest roadmap with its lessons and completions."""
    timeout = load_app_config().timeouts.store_query

    roadmap = await run_blocking(
        roadmaps_repository.get_latest_roadmap, client, user.id, timeout=timeout
    )
    if roadmap is None:
        return RoadmapView()

    lessons, completions = await asyncio.gather(
        run_blocking(lessons_repository.list_lessons, client, roadmap.id, timeout=timeout),
        run_blocking(completions_repository.list_completions, client, user.id, timeout=timeout),
    )

    lesson_ids = {lesson.id for lesson in lessons}
    return RoadmapView(
        roadmap=roadmap,
        lessons=lessons,
        completions=[c for c in completions if c.lesson_id in lesson_ids],
    )


async def delete_roadmap(
    client: Client,
    roadmap_id: str,
    notifications: NotificationCenter | None = None,
) -> None:
    """Delete a roadmap; its lessons and progress go with it.

    Raises:
        PathwiseError: "Delete Failed"
    """
    notifications = notifications or NotificationCenter()
    try:
        await run_blocking(
            roadmaps_repository.delete_roadmap,
            client,
            roadmap_id,
            timeout=load_app_config().timeouts.store_query,
        )
    except PathwiseError as e:
        message = "Failed to delete roadmap. Please try again."
        logger.error("roadmap_delete_failed", roadmap_id=roadmap_id, error=e.message)
        notifications.show_error("Delete Failed", message)
        raise PathwiseError(message, title="Delete Failed", category=e.category) from e

    notifications.show_success("Roadmap Deleted", "Your roadmap has been deleted successfully.")
    logger.info("roadmap_deleted", roadmap_id=roadmap_id)


async def alter_roadmap(
    client: Client,
    roadmap: Roadmap,
    request: str,
    *,
    llm: LLMClient | None = None,
    notifications: NotificationCenter | None = None,
) -> Roadmap:
    """Regenerate a roadmap from a change request.

    Replaces its weeks and lessons and resets progress on it.

    Raises:
        ValidationError: If the request is blank
        PathwiseError: "Update Failed" on generation or store failure
    """
    notifications = notifications or NotificationCenter()
    if not request.strip():
        raise ValidationError("Please describe the changes you want to make.")

    timeouts = load_app_config().timeouts

    try:
        weeks = await run_blocking(
            alter_roadmap_weeks,
            roadmap.goal,
            request,
            llm,
            timeouts.roadmap,
            timeout=timeouts.roadmap + 1,
            timeout_message="Roadmap generation timed out",
        )
        lessons = lessons_from_weeks(roadmap.id, weeks)

        await run_blocking(
            roadmaps_repository.update_roadmap_weeks,
            client,
            roadmap.id,
            weeks,
            timeout=timeouts.store_query,
        )
        await run_blocking(
            lessons_repository.delete_lessons_for_roadmap,
            client,
            roadmap.id,
            timeout=timeouts.store_query,
        )
        await run_blocking(
            lessons_repository.insert_lessons, client, lessons, timeout=timeouts.store_query
        )
        await run_blocking(
            progress_repository.reset_progress_for_roadmap,
            client,
            roadmap.id,
            len(lessons),
            timeout=timeouts.store_query,
        )
    except PathwiseError as e:
        message = e.message or "Failed to alter roadmap. Please try again."
        logger.error("roadmap_alter_failed", roadmap_id=roadmap.id, error=message)
        notifications.show_error("Update Failed", message)
        raise

    roadmap.weeks = weeks
    notifications.show_success(
        "Roadmap Updated",
        "Your roadmap has been successfully updated with your requested changes.",
    )
    logger.info("roadmap_altered", roadmap_id=roadmap.id, weeks=len(weeks), lessons=len(lessons))
    return roadmap
