"""Roadmap generation module.

Responsibilities:
- Generate an 8-week learning roadmap from a goal and clarifying answers
- Regenerate a roadmap from a change request
- Flatten roadmap weeks into lesson rows (one lesson per topic)

Output structure (JSON array of weeks):
[{"title": "Week 1: ...", "topics": [{"title", "lessonObjective", "estimatedTime"}]}]
"""

from __future__ import annotations

from typing import Any

import structlog

from pathwise.config.app_config import load_app_config
from pathwise.llm.client import LLMClient, LLMResponseError

logger = structlog.get_logger(__name__)

# =============================================================================
# PROMPTS
# =============================================================================

ROADMAP_WEEKS = 8

INVALID_ROADMAP_MESSAGE = "Invalid roadmap format received from AI"

USER_PROMPT_ROADMAP = """Create a detailed {weeks}-week learning roadmap for: {goal}

User answers:
{answers}

Return ONLY a JSON array of weeks with this exact format:
[
  {{
    "title": "Week 1: Foundation",
    "topics": [
      {{
        "title": "Topic Name",
        "lessonObjective": "What you'll learn",
        "estimatedTime": "2 hours"
      }}
    ]
  }}
]

No explanations, no markdown, just the JSON array."""


def format_answers(answers: dict[str, Any]) -> str:
    """Render answers one per line as "question: answer"."""
    return "\n".join(f"{question}: {answer}" for question, answer in answers.items())


def build_roadmap_prompt(goal: str, answers: dict[str, Any]) -> str:
    """Build the roadmap prompt for a goal and its answers."""
    return USER_PROMPT_ROADMAP.format(
        weeks=ROADMAP_WEEKS,
        goal=goal,
        answers=format_answers(answers),
    )


# =============================================================================
# MAIN FUNCTIONS
# =============================================================================


def generate_roadmap(
    goal: str,
    answers: dict[str, Any],
    client: LLMClient | None = None,
    timeout: float | None = None,
) -> list[dict[str, Any]]:
    """Generate roadmap weeks for a goal.

    Args:
        goal: Learning goal
        answers: Clarifying answers keyed by question text
        client: Optional pre-configured LLM client (for testing)
        timeout: Override the configured timeout (seconds)

    Returns:
        List of week dicts, as returned by the model

    Raises:
        LLMResponseError: If the reply is not an array or holds no usable topic
        LLMError: On any other generation failure (already user-facing)
    """
    if client is None:
        client = LLMClient()
    if timeout is None:
        timeout = load_app_config().timeouts.roadmap

    logger.info("generating_roadmap", goal=goal, answers=len(answers))

    weeks = client.generate_json(build_roadmap_prompt(goal, answers), timeout=timeout)

    if not isinstance(weeks, list):
        raise LLMResponseError(INVALID_ROADMAP_MESSAGE)

    lesson_count = len(lessons_from_weeks("", weeks))
    if not lesson_count:
        logger.error("roadmap_without_lessons", weeks=len(weeks))
        raise LLMResponseError(INVALID_ROADMAP_MESSAGE)

    logger.info("roadmap_generated", weeks=len(weeks), lessons=lesson_count)
    return weeks


def alter_roadmap_weeks(
    goal: str,
    alter_request: str,
    client: LLMClient | None = None,
    timeout: float | None = None,
) -> list[dict[str, Any]]:
    """Regenerate roadmap weeks for a goal from a user change request."""
    return generate_roadmap(
        goal,
        {"alterRequest": alter_request},
        client=client,
        timeout=timeout,
    )


def lessons_from_weeks(roadmap_id: str, weeks: list[Any]) -> list[dict[str, Any]]:
    """Flatten roadmap weeks into lesson rows.

    week_number is 1-based; order_index is the topic's position in its week.
    Weeks without a topic list contribute no lessons; topics that are not
    objects are skipped.
    """
    lessons = []
    for week_index, week in enumerate(weeks):
        topics = week.get("topics") if isinstance(week, dict) else None
        if topics is None:
            continue
        if not isinstance(topics, list):
            logger.warning("week_topics_skipped", week=week_index + 1, topics=str(topics)[:100])
            continue
        for topic_index, topic in enumerate(topics):
            if not isinstance(topic, dict):
                logger.warning("topic_skipped", week=week_index + 1, topic=str(topic)[:100])
                continue
            lessons.append(
                {
                    "roadmap_id": roadmap_id,
                    "week_number": week_index + 1,
                    "title": str(topic.get("title") or ""),
                    "lesson_objective": str(topic.get("lessonObjective") or ""),
                    "estimated_time": str(topic.get("estimatedTime") or ""),
                    "order_index": topic_index,
                }
            )
    return lessons
