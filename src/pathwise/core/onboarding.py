"""Onboarding: goal -> clarifying questions -> roadmap.

OnboardingFlow walks one user through three steps:
1. state a goal (questions are generated)
2. answer each question in turn
3. create the roadmap, its lessons and a zeroed progress record

The web API is stateless, so a flow can also be rebuilt at step 3 from the
goal, questions and answers a client sends back.
"""

from __future__ import annotations

from typing import Any

import structlog
from supabase import Client

from pathwise.config.app_config import load_app_config
from pathwise.core.auth import AuthService, AuthUser
from pathwise.core.errors import AuthError, PathwiseError
from pathwise.core.notifications import NotificationAction, NotificationCenter
from pathwise.core.question_generator import generate_questions
from pathwise.core.roadmap_generator import generate_roadmap, lessons_from_weeks
from pathwise.llm.client import LLMClient
from pathwise.store import lessons_repository, progress_repository, roadmaps_repository
from pathwise.store.client import StoreError
from pathwise.store.models import Roadmap
from pathwise.store.profiles_repository import upsert_profile
from pathwise.utils.async_utils import run_blocking

logger = structlog.get_logger(__name__)

STEP_GOAL = 1
STEP_QUESTIONS = 2
STEP_READY = 3

ROADMAP_TITLE = "Learning Roadmap: {goal}"
RETRYABLE_MARKER = "AI service is temporarily unavailable"


class OnboardingFlow:
    """State machine for one onboarding session."""

    def __init__(
        self,
        client: Client,
        notifications: NotificationCenter | None = None,
        llm: LLMClient | None = None,
        auth: AuthService | None = None,
    ):
        self._client = client
        self._llm = llm
        self._auth = auth
        self._timeouts = load_app_config().timeouts
        self.notifications = notifications or NotificationCenter()

        self.step = STEP_GOAL
        self.goal = ""
        self.questions: list[dict[str, Any]] = []
        self.current_question = 0
        self.answers: dict[str, str] = {}
        self.loading = False

    @classmethod
    def restore(
        cls,
        client: Client,
        goal: str,
        questions: list[dict[str, Any]],
        answers: dict[str, str],
        **kwargs: Any,
    ) -> OnboardingFlow:
        """Rebuild a flow that is ready to create its roadmap."""
        flow = cls(client, **kwargs)
        flow.goal = goal
        flow.questions = list(questions)
        flow.answers = dict(answers)
        flow.current_question = max(len(questions) - 1, 0)
        flow.step = STEP_READY
        return flow

    @property
    def question(self) -> dict[str, Any] | None:
        if self.step != STEP_QUESTIONS or not self.questions:
            return None
        return self.questions[self.current_question]

    # =========================================================================
    # STEP 1: GOAL
    # =========================================================================

    async def submit_goal(self, goal: str) -> list[dict[str, Any]]:
        """Generate clarifying questions for a goal.

        A blank goal is ignored and leaves the flow unchanged.

        Raises:
            LLMError: If generation failed (a notification is also added)
        """
        if not goal.strip():
            return self.questions

        self.loading = True
        try:
            questions = await run_blocking(
                generate_questions,
                goal,
                self._llm,
                self._timeouts.questions,
                timeout=self._timeouts.questions + 1,
                timeout_message="Question generation timed out",
            )
        except PathwiseError as e:
            self.notifications.show_error(
                "Generation Failed",
                e.message or "Failed to generate questions. Please try again.",
            )
            raise
        finally:
            self.loading = False

        self.goal = goal
        self.questions = [q.to_dict() for q in questions]
        self.current_question = 0
        self.answers = {}
        self.step = STEP_QUESTIONS
        self.notifications.show_success(
            "Questions Generated", "Your personalized questions are ready!"
        )
        return self.questions

    # =========================================================================
    # STEP 2: ANSWERS
    # =========================================================================

    def answer(self, answer: str) -> int:
        """Record an answer for the current question and advance.

        Returns:
            The step after answering (2 while questions remain, then 3)
        """
        question = self.question
        if question is None:
            return self.step

        self.answers[question["question"]] = answer
        if self.current_question < len(self.questions) - 1:
            self.current_question += 1
        else:
            self.step = STEP_READY
        return self.step

    # =========================================================================
    # STEP 3: ROADMAP
    # =========================================================================

    async def create_roadmap(self, user: AuthUser | None) -> Roadmap:
        """Generate and store the roadmap with its lessons and progress.

        Raises:
            AuthError: If no user is signed in
            PathwiseError: On generation or store failure
        """
        if user is None:
            message = "You must be logged in to create a roadmap."
            self.notifications.show_error("Authentication Error", message)
            raise AuthError(message)

        self.loading = True
        try:
            roadmap = await self._create_roadmap(user)
        except PathwiseError as e:
            message = e.message or "Failed to generate roadmap. Please try again."
            logger.error("roadmap_creation_failed", user_id=user.id, error=message)
            action = None
            if RETRYABLE_MARKER in message:
                action = NotificationAction("Retry", lambda: self.create_roadmap(user))
            self.notifications.show_error("Creation Failed", message, action=action)
            raise
        finally:
            self.loading = False

        self.notifications.show_success(
            "Roadmap Created", "Your personalized learning roadmap is ready!"
        )
        return roadmap

    async def _create_roadmap(self, user: AuthUser) -> Roadmap:
        store_timeout = self._timeouts.store_query

        weeks = await run_blocking(
            generate_roadmap,
            self.goal,
            self.answers,
            self._llm,
            self._timeouts.roadmap,
            timeout=self._timeouts.roadmap + 1,
            timeout_message="Roadmap generation timed out",
        )

        roadmap = await run_blocking(
            roadmaps_repository.insert_roadmap,
            self._client,
            user.id,
            ROADMAP_TITLE.format(goal=self.goal),
            self.goal,
            weeks,
            self.questions,
            self.answers,
            timeout=store_timeout,
        )
        if roadmap is None:
            raise StoreError(
                "Failed to retrieve roadmap after creation. Please check table "
                "permissions (RLS) and try again."
            )

        lessons = lessons_from_weeks(roadmap.id, weeks)
        try:
            if lessons:
                await run_blocking(
                    lessons_repository.insert_lessons,
                    self._client,
                    lessons,
                    timeout=store_timeout,
                )

            await run_blocking(
                progress_repository.insert_progress,
                self._client,
                user.id,
                roadmap.id,
                len(lessons),
                timeout=store_timeout,
            )
        except PathwiseError:
            await self._discard_roadmap(roadmap.id)
            raise

        if self._auth is not None and self._auth.user is not None:
            await self._auth.update_profile({"goal": self.goal})
        else:
            await run_blocking(
                upsert_profile,
                self._client,
                user.id,
                user.email,
                {"goal": self.goal},
                timeout=store_timeout,
            )

        logger.info(
            "roadmap_created",
            roadmap_id=roadmap.id,
            user_id=user.id,
            weeks=len(weeks),
            lessons=len(lessons),
        )
        return roadmap

    async def _discard_roadmap(self, roadmap_id: str) -> None:
        """Remove a half-created roadmap (lessons and progress cascade)."""
        try:
            await run_blocking(
                roadmaps_repository.delete_roadmap,
                self._client,
                roadmap_id,
                timeout=self._timeouts.store_query,
            )
        except PathwiseError as e:
            logger.error("roadmap_cleanup_failed", roadmap_id=roadmap_id, error=e.message)
            return
        logger.warning("roadmap_discarded", roadmap_id=roadmap_id)
