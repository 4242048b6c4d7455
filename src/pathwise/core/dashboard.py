"""Dashboard: latest roadmap, progress and recent activity."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog
from supabase import Client

from pathwise.config.app_config import load_app_config
from pathwise.core.auth import AuthUser
from pathwise.core.errors import PathwiseError
from pathwise.core.progress import (
    completion_percentage,
    format_minutes,
    round_half_up,
    week_completion_percentage,
)
from pathwise.store import completions_repository, progress_repository, roadmaps_repository
from pathwise.store.models import LessonCompletion, Roadmap, UserProgress
from pathwise.utils.async_utils import run_blocking

logger = structlog.get_logger(__name__)


@dataclass
class Dashboard:
    roadmap: Roadmap | None = None
    progress: UserProgress | None = None
    recent_completions: list[LessonCompletion] = field(default_factory=list)

    def stats(self) -> dict[str, Any] | None:
        """Stat cards, or None until both roadmap and progress are known."""
        if self.roadmap is None or self.progress is None:
            return None

        progress = self.progress
        return {
            "completion_percentage": completion_percentage(progress),
            "completed_lessons": progress.completed_lessons,
            "total_lessons": progress.total_lessons,
            "current_week": progress.current_week,
            "total_weeks": self.roadmap.total_weeks,
            "week_progress": week_completion_percentage(progress, self.roadmap.total_weeks),
            "time_spent": format_minutes(progress.total_time_spent),
            "average_accuracy": round_half_up(progress.average_accuracy),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "roadmap": self.roadmap.to_dict() if self.roadmap else None,
            "progress": self.progress.to_dict() if self.progress else None,
            "recent_completions": [c.to_dict() for c in self.recent_completions],
            "stats": self.stats(),
        }


async def load_dashboard(client: Client, user: AuthUser) -> Dashboard:
    """Load the dashboard for a user.

    Only the roadmap lookup can fail the call; progress and recent
    completions degrade to empty.

    Raises:
        PathwiseError: If the roadmap lookup failed or timed out
    """
    timeouts = load_app_config().timeouts

    roadmap = await run_blocking(
        roadmaps_repository.get_latest_roadmap,
        client,
        user.id,
        timeout=timeouts.store_query,
        timeout_message="Request timeout",
    )
    if roadmap is None:
        logger.info("dashboard_no_roadmap", user_id=user.id)
        return Dashboard()

    progress = None
    try:
        progress = await run_blocking(
            progress_repository.get_progress,
            client,
            user.id,
            roadmap.id,
            timeout=timeouts.store_query,
            timeout_message="Request timeout",
        )
    except PathwiseError as e:
        logger.warning("dashboard_progress_failed", user_id=user.id, error=e.message)

    recent: list[LessonCompletion] = []
    try:
        recent = await run_blocking(
            completions_repository.list_recent_completions,
            client,
            user.id,
            roadmap.id,
            timeout=timeouts.store_query,
        )
    except PathwiseError as e:
        logger.warning("dashboard_completions_failed", user_id=user.id, error=e.message)

    return Dashboard(roadmap=roadmap, progress=progress, recent_completions=recent)
