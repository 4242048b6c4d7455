"""Lesson viewing and completion.

Loads a lesson with its generated content (local cache first, then the
lesson row, then the AI endpoint), records completions and keeps the
roadmap's progress counters in step.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Literal

import structlog
from supabase import Client

from pathwise.config.app_config import TimeoutConfig, load_app_config
from pathwise.core.auth import AuthUser
from pathwise.core.errors import NotFoundError, PathwiseError, classify_error
from pathwise.core.lesson_content_generator import generate_lesson_content
from pathwise.core.notifications import NotificationAction, NotificationCenter
from pathwise.core.progress import (
    DEFAULT_TIME_SPENT,
    apply_completion,
    is_passing,
    result_message,
    score_assessment,
)
from pathwise.db.content_cache import cache_lesson_content, get_cached_lesson_content
from pathwise.llm.client import LLMClient
from pathwise.store import completions_repository, lessons_repository, progress_repository
from pathwise.store.models import Lesson, LessonCompletion, Roadmap, UserProgress
from pathwise.store.roadmaps_repository import get_latest_roadmap
from pathwise.utils.async_utils import run_blocking

logger = structlog.get_logger(__name__)

MARK_COMPLETE_SCORE = 100

Direction = Literal["prev", "next"]


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class LessonView:
    """A lesson with its content and navigation context."""

    lesson: Lesson
    lessons: list[Lesson]
    content: dict[str, Any]
    completed: bool = False

    @property
    def previous(self) -> Lesson | None:
        return neighbor(self.lessons, self.lesson.id, "prev")

    @property
    def next(self) -> Lesson | None:
        return neighbor(self.lessons, self.lesson.id, "next")

    def to_dict(self) -> dict[str, Any]:
        return {
            "lesson": self.lesson.to_dict(),
            "content": self.content,
            "completed": self.completed,
            "previous_id": self.previous.id if self.previous else None,
            "next_id": self.next.id if self.next else None,
            "position": [lesson.id for lesson in self.lessons].index(self.lesson.id) + 1,
            "total": len(self.lessons),
        }


@dataclass
class AssessmentResult:
    score: int
    passed: bool
    message: str
    total_questions: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "passed": self.passed,
            "message": self.message,
            "total_questions": self.total_questions,
        }


@dataclass
class WeekLessons:
    week_number: int
    lessons: list[Lesson] = field(default_factory=list)
    completed_count: int = 0


@dataclass
class LessonsOverview:
    """All lessons of the user's current roadmap grouped by week."""

    roadmap: Roadmap | None
    weeks: list[WeekLessons] = field(default_factory=list)
    completions: list[LessonCompletion] = field(default_factory=list)

    def score_for(self, lesson_id: str) -> int:
        for completion in self.completions:
            if completion.lesson_id == lesson_id:
                return completion.score or 0
        return 0

    def is_completed(self, lesson_id: str) -> bool:
        return any(c.lesson_id == lesson_id for c in self.completions)

    def to_dict(self) -> dict[str, Any]:
        return {
            "roadmap": self.roadmap.to_dict() if self.roadmap else None,
            "weeks": [
                {
                    "week_number": week.week_number,
                    "completed_count": week.completed_count,
                    "total": len(week.lessons),
                    "lessons": [
                        {
                            **lesson.to_dict(),
                            "completed": self.is_completed(lesson.id),
                            "score": self.score_for(lesson.id),
                        }
                        for lesson in week.lessons
                    ],
                }
                for week in self.weeks
            ],
        }


# =============================================================================
# NAVIGATION
# =============================================================================


def neighbor(lessons: list[Lesson], lesson_id: str, direction: Direction) -> Lesson | None:
    """Previous or next lesson in roadmap order, None at either end."""
    ids = [lesson.id for lesson in lessons]
    if lesson_id not in ids:
        return None
    target = ids.index(lesson_id) + (1 if direction == "next" else -1)
    if 0 <= target < len(lessons):
        return lessons[target]
    return None


def group_by_week(lessons: list[Lesson], completions: list[LessonCompletion]) -> list[WeekLessons]:
    done = {c.lesson_id for c in completions}
    weeks: dict[int, WeekLessons] = {}
    for lesson in lessons:
        week = weeks.setdefault(lesson.week_number, WeekLessons(lesson.week_number))
        week.lessons.append(lesson)
        if lesson.id in done:
            week.completed_count += 1
    return [weeks[number] for number in sorted(weeks)]


# =============================================================================
# LOADING
# =============================================================================


async def load_lesson(
    client: Client,
    lesson_id: str,
    user: AuthUser | None = None,
    *,
    llm: LLMClient | None = None,
    notifications: NotificationCenter | None = None,
    timeouts: TimeoutConfig | None = None,
) -> LessonView:
    """Load a lesson, its roadmap siblings and its content.

    Raises:
        NotFoundError: If the lesson does not exist (or is not visible)
        PathwiseError: On store or generation failure
    """
    timeouts = timeouts or load_app_config().timeouts

    try:
        lesson = await run_blocking(
            lessons_repository.get_lesson, client, lesson_id, timeout=timeouts.store_query
        )
        if lesson is None:
            raise NotFoundError("Lesson not found")

        lessons = await run_blocking(
            lessons_repository.list_lessons,
            client,
            lesson.roadmap_id,
            timeout=timeouts.store_query,
        )
        content = await _lesson_content(client, lesson, llm, timeouts)

    except PathwiseError as e:
        logger.error("lesson_load_failed", lesson_id=lesson_id, error=e.message)
        if notifications is not None:
            notifications.show_error(
                "Loading Failed",
                e.message or "Failed to load lesson",
                action=NotificationAction(
                    "Retry",
                    lambda: load_lesson(
                        client,
                        lesson_id,
                        user,
                        llm=llm,
                        notifications=notifications,
                        timeouts=timeouts,
                    ),
                ),
            )
        raise

    completed = await is_completed(client, user, lesson_id) if user else False
    return LessonView(lesson=lesson, lessons=lessons, content=content, completed=completed)


async def _lesson_content(
    client: Client,
    lesson: Lesson,
    llm: LLMClient | None,
    timeouts: TimeoutConfig,
) -> dict[str, Any]:
    cached = get_cached_lesson_content(lesson.id)
    if cached is not None:
        logger.debug("lesson_content_cache_hit", lesson_id=lesson.id)
        return cached

    if lesson.content:
        cache_lesson_content(lesson.id, lesson.content)
        return lesson.content

    content = await run_blocking(
        generate_lesson_content,
        lesson,
        llm,
        timeouts.lesson_content,
        timeout=timeouts.lesson_content + 1,
        timeout_message="Lesson content generation timed out",
    )
    cache_lesson_content(lesson.id, content)

    try:
        await run_blocking(
            lessons_repository.set_lesson_content,
            client,
            lesson.id,
            content,
            timeout=timeouts.store_query,
        )
    except PathwiseError as e:
        # Local cache still holds the content
        logger.warning("lesson_content_not_persisted", lesson_id=lesson.id, error=e.message)

    return content


async def is_completed(client: Client, user: AuthUser, lesson_id: str) -> bool:
    """Whether the user has a completion for this lesson (False on error)."""
    try:
        completion = await run_blocking(
            completions_repository.get_completion,
            client,
            user.id,
            lesson_id,
            timeout=load_app_config().timeouts.store_query,
        )
    except PathwiseError as e:
        logger.error("completion_check_failed", lesson_id=lesson_id, error=e.message)
        return False
    return completion is not None


async def list_lessons(client: Client, user: AuthUser) -> LessonsOverview:
    """Lessons of the user's latest roadmap with completion state.

    Lessons and completions are fetched concurrently.
    """
    timeouts = load_app_config().timeouts

    roadmap = await run_blocking(
        get_latest_roadmap,
        client,
        user.id,
        timeout=timeouts.store_query,
        timeout_message="Request timeout",
    )
    if roadmap is None:
        return LessonsOverview(roadmap=None)

    lessons, completions = await asyncio.gather(
        run_blocking(
            lessons_repository.list_lessons, client, roadmap.id, timeout=timeouts.store_query
        ),
        run_blocking(
            completions_repository.list_completions,
            client,
            user.id,
            timeout=timeouts.store_query,
        ),
    )

    logger.debug("lessons_listed", roadmap_id=roadmap.id, lessons=len(lessons))
    return LessonsOverview(
        roadmap=roadmap,
        weeks=group_by_week(lessons, completions),
        completions=completions,
    )


# =============================================================================
# COMPLETION
# =============================================================================


async def _record_progress(
    client: Client, user_id: str, roadmap_id: str, score: int, timeout: float
) -> UserProgress | None:
    progress = await run_blocking(
        progress_repository.get_progress, client, user_id, roadmap_id, timeout=timeout
    )
    if progress is None:
        logger.warning("progress_missing", user_id=user_id, roadmap_id=roadmap_id)
        return None

    apply_completion(progress, score, DEFAULT_TIME_SPENT)
    await run_blocking(
        progress_repository.update_progress_counters, client, progress, timeout=timeout
    )
    return progress


async def mark_complete(
    client: Client,
    user: AuthUser,
    lesson: Lesson,
    notifications: NotificationCenter | None = None,
) -> UserProgress | None:
    """Mark a lesson as read: full score, default time credit.

    Returns:
        Updated progress record, or None if the user has none for this roadmap

    Raises:
        PathwiseError: "Save Failed" if anything could not be written
    """
    notifications = notifications or NotificationCenter()
    timeout = load_app_config().timeouts.store_query

    try:
        await run_blocking(
            completions_repository.upsert_completion,
            client,
            user.id,
            lesson.id,
            MARK_COMPLETE_SCORE,
            DEFAULT_TIME_SPENT,
            {},
            timeout=timeout,
        )
        notifications.show_success(
            "Lesson Completed", "Great job! You can now move to the next lesson."
        )
        progress = await _record_progress(
            client, user.id, lesson.roadmap_id, MARK_COMPLETE_SCORE, timeout
        )
    except PathwiseError as e:
        message = "Failed to mark lesson as complete. Please try again."
        logger.error("mark_complete_failed", lesson_id=lesson.id, error=e.message)
        notifications.show_error("Save Failed", message)
        raise PathwiseError(message, title="Save Failed", category=classify_error(e)) from e

    logger.info("lesson_marked_complete", lesson_id=lesson.id, user_id=user.id)
    return progress


async def complete_test(
    client: Client,
    user: AuthUser,
    lesson: Lesson,
    content: dict[str, Any],
    answers: list[str],
    notifications: NotificationCenter | None = None,
) -> AssessmentResult:
    """Score a lesson test, record the completion and update progress.

    Raises:
        PathwiseError: "Save Failed" if the result could not be written
    """
    notifications = notifications or NotificationCenter()
    timeout = load_app_config().timeouts.store_query

    questions = [q for q in content.get("assessmentQuestions") or [] if isinstance(q, dict)]
    score = score_assessment(questions, answers)
    result = AssessmentResult(
        score=score,
        passed=is_passing(score),
        message=result_message(score),
        total_questions=len(questions),
    )

    try:
        await run_blocking(
            completions_repository.upsert_completion,
            client,
            user.id,
            lesson.id,
            score,
            DEFAULT_TIME_SPENT,
            list(answers),
            timeout=timeout,
        )
        await _record_progress(client, user.id, lesson.roadmap_id, score, timeout)
    except PathwiseError as e:
        message = "Failed to save test results. Please try again."
        logger.error("test_save_failed", lesson_id=lesson.id, error=e.message)
        notifications.show_error("Save Failed", message)
        raise PathwiseError(message, title="Save Failed", category=classify_error(e)) from e

    notifications.show_success("Test Completed", result.message)
    logger.info("test_completed", lesson_id=lesson.id, score=score, passed=result.passed)
    return result
