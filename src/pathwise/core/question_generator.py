"""Clarifying question generation.

Responsibilities:
- Ask the LLM for questions that narrow down a learning goal
- Validate the reply is a JSON array
- Normalise entries into ClarifyingQuestion objects
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from pathwise.config.app_config import load_app_config
from pathwise.llm.client import LLMClient, LLMResponseError

logger = structlog.get_logger(__name__)

# =============================================================================
# PROMPTS
# =============================================================================

QUESTION_COUNT = 5

USER_PROMPT_QUESTIONS = """Generate {n} specific questions to understand the user's learning needs for: {goal}

Return ONLY a JSON array with this exact format:
[
  {{
    "question": "What is your current experience level?",
    "options": ["Beginner", "Intermediate", "Advanced"]
  }}
]

No explanations, no markdown, just the JSON array."""


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class ClarifyingQuestion:
    """A multiple-choice question about the learner's needs."""

    question: str
    options: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"question": self.question, "options": self.options}


def build_questions_prompt(goal: str, n: int = QUESTION_COUNT) -> str:
    """Build the question generation prompt for a goal."""
    return USER_PROMPT_QUESTIONS.format(n=n, goal=goal)


def _parse_questions(raw: list[Any]) -> list[ClarifyingQuestion]:
    """Parse questions from LLM response, skipping malformed entries."""
    questions = []
    for item in raw:
        if isinstance(item, str):
            questions.append(ClarifyingQuestion(question=item))
            continue
        if not isinstance(item, dict) or not item.get("question"):
            logger.warning("question_skipped", item=str(item)[:100])
            continue
        options = item.get("options") or []
        questions.append(
            ClarifyingQuestion(
                question=str(item["question"]),
                options=[str(o) for o in options],
            )
        )
    return questions


def generate_questions(
    goal: str,
    client: LLMClient | None = None,
    timeout: float | None = None,
) -> list[ClarifyingQuestion]:
    """Generate clarifying questions for a learning goal.

    Args:
        goal: Learning goal as stated by the user
        client: Optional pre-configured LLM client (for testing)
        timeout: Override the configured timeout (seconds)

    Returns:
        List of ClarifyingQuestion

    Raises:
        LLMError: On any generation failure (already user-facing)
    """
    if client is None:
        client = LLMClient()
    if timeout is None:
        timeout = load_app_config().timeouts.questions

    logger.info("generating_questions", goal=goal)

    raw = client.generate_json(build_questions_prompt(goal), timeout=timeout)

    if not isinstance(raw, list):
        raise LLMResponseError("Invalid questions format received from AI")

    questions = _parse_questions(raw)
    logger.info("questions_generated", count=len(questions))
    return questions
