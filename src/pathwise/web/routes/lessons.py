"""Lesson endpoints: list, view, complete, test."""

from fastapi import APIRouter, Depends

from pathwise.config.app_config import load_app_config
from pathwise.core import lessons
from pathwise.core.auth import AuthService
from pathwise.core.errors import NotFoundError
from pathwise.llm.client import LLMClient
from pathwise.store import lessons_repository
from pathwise.utils.async_utils import run_blocking
from pathwise.web.deps import get_llm_client, notifications_payload, require_user
from pathwise.web.schemas import (
    AnswersSubmission,
    AssessmentResultResponse,
    CompletionResponse,
    LessonResponse,
    LessonsResponse,
)

router = APIRouter(prefix="/api/lessons", tags=["lessons"])


@router.get("", response_model=LessonsResponse)
async def list_lessons(auth: AuthService = Depends(require_user)) -> LessonsResponse:
    """Lessons of the latest roadmap grouped by week."""
    overview = await lessons.list_lessons(auth.client, auth.user)
    return LessonsResponse(**overview.to_dict())


@router.get("/{lesson_id}", response_model=LessonResponse)
async def get_lesson(
    lesson_id: str,
    auth: AuthService = Depends(require_user),
    llm: LLMClient = Depends(get_llm_client),
) -> LessonResponse:
    """A lesson with its content (generated on first view)."""
    view = await lessons.load_lesson(auth.client, lesson_id, auth.user, llm=llm)
    return LessonResponse(**view.to_dict())


@router.post("/{lesson_id}/complete", response_model=CompletionResponse)
async def complete_lesson(
    lesson_id: str, auth: AuthService = Depends(require_user)
) -> CompletionResponse:
    """Mark a lesson as read (no content is loaded or generated)."""
    lesson = await run_blocking(
        lessons_repository.get_lesson,
        auth.client,
        lesson_id,
        timeout=load_app_config().timeouts.store_query,
    )
    if lesson is None:
        raise NotFoundError("Lesson not found")

    progress = await lessons.mark_complete(auth.client, auth.user, lesson, auth.notifications)
    return CompletionResponse(
        progress=progress.to_dict() if progress else None,
        notifications=notifications_payload(auth.notifications),
    )


@router.post("/{lesson_id}/test", response_model=AssessmentResultResponse)
async def submit_test(
    lesson_id: str,
    body: AnswersSubmission,
    auth: AuthService = Depends(require_user),
    llm: LLMClient = Depends(get_llm_client),
) -> AssessmentResultResponse:
    """Score a lesson test and record the result."""
    view = await lessons.load_lesson(auth.client, lesson_id, auth.user, llm=llm)
    result = await lessons.complete_test(
        auth.client,
        auth.user,
        view.lesson,
        view.content,
        body.answers,
        auth.notifications,
    )
    return AssessmentResultResponse(
        **result.to_dict(), notifications=notifications_payload(auth.notifications)
    )
