"""Lesson content generation module.

Responsibilities:
- Generate the body of a lesson (explanation, key concepts, code examples,
  interactive elements and assessment questions) with the LLM
- Validate the reply is a JSON object
- Provide typed accessors over the stored payload

Output structure (JSON object):
- title, lessonObjective, estimatedTime, lessonContent
- keyConcepts[], exampleCode[], interactiveElements[], assessmentQuestions[]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

import structlog

from pathwise.config.app_config import load_app_config
from pathwise.llm.client import LLMClient, LLMResponseError
from pathwise.store.models import Lesson

logger = structlog.get_logger(__name__)

# =============================================================================
# TYPES
# =============================================================================

QuestionType = Literal["multiple-choice", "open-ended"]
ElementType = Literal["diagram", "playground", "demo"]

# =============================================================================
# PROMPTS
# =============================================================================

USER_PROMPT_LESSON = """Create comprehensive lesson content for:
Title: {title}
Objective: {objective}
Time: {estimated_time}

Return ONLY this JSON format with enhanced interactive features:
{{
  "title": "{title}",
  "lessonObjective": "{objective}",
  "estimatedTime": "{estimated_time}",
  "lessonContent": "Detailed explanation in 4-5 paragraphs with step-by-step breakdown",
  "keyConcepts": ["concept1", "concept2", "concept3", "concept4"],
  "exampleCode": [
    {{
      "description": "Example description with syntax highlighting",
      "code": "well-formatted code with proper indentation",
      "output": "expected output or result"
    }}
  ],
  "interactiveElements": [
    {{
      "type": "playground",
      "title": "Interactive Playground",
      "description": "Try experimenting with the concepts",
      "content": {{}}
    }},
    {{
      "type": "demo",
      "title": "Visual Demo",
      "description": "See how changes affect outcomes",
      "content": {{}}
    }}
  ],
  "assessmentQuestions": [
    {{
      "question": "Question text?",
      "type": "multiple-choice",
      "options": ["Option A", "Option B", "Option C", "Option D"],
      "answer": "Option A",
      "explanation": "Detailed explanation of why this is correct"
    }},
    {{
      "question": "Open-ended question?",
      "type": "open-ended",
      "answer": "Expected answer or key points",
      "explanation": "What to look for in the answer"
    }}
  ]
}}

Include:
- Interactive visual diagrams explanations
- Live input-output playgrounds for experimentation
- Dynamic element manipulation demos
- Syntax-highlighted code blocks
- Chapter-based quizzes with both multiple-choice and open-ended questions
- Instant feedback with detailed explanations

No explanations, no markdown, just the JSON object."""


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class AssessmentQuestion:
    """A quiz question attached to a lesson."""

    question: str
    answer: str
    type: QuestionType = "multiple-choice"
    options: list[str] | None = None
    explanation: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssessmentQuestion:
        q_type = data.get("type", "multiple-choice")
        if q_type not in ("multiple-choice", "open-ended"):
            q_type = "open-ended" if not data.get("options") else "multiple-choice"
        return cls(
            question=str(data.get("question") or ""),
            answer=str(data.get("answer") or ""),
            type=q_type,
            options=data.get("options"),
            explanation=str(data.get("explanation") or ""),
        )


@dataclass
class LessonContent:
    """Generated lesson body."""

    title: str
    lesson_objective: str
    estimated_time: str
    lesson_content: str = ""
    key_concepts: list[str] = field(default_factory=list)
    example_code: list[dict[str, Any]] = field(default_factory=list)
    interactive_elements: list[dict[str, Any]] = field(default_factory=list)
    assessment_questions: list[AssessmentQuestion] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LessonContent:
        """Build from the camelCase payload stored in the cache."""
        return cls(
            title=data.get("title", ""),
            lesson_objective=data.get("lessonObjective", ""),
            estimated_time=data.get("estimatedTime", ""),
            lesson_content=data.get("lessonContent", ""),
            key_concepts=list(data.get("keyConcepts") or []),
            example_code=list(data.get("exampleCode") or []),
            interactive_elements=list(data.get("interactiveElements") or []),
            assessment_questions=[
                AssessmentQuestion.from_dict(q)
                for q in data.get("assessmentQuestions") or []
                if isinstance(q, dict)
            ],
        )


def build_lesson_prompt(lesson: Lesson) -> str:
    """Build the lesson content prompt for a lesson row."""
    return USER_PROMPT_LESSON.format(
        title=lesson.title,
        objective=lesson.lesson_objective,
        estimated_time=lesson.estimated_time,
    )


# =============================================================================
# MAIN FUNCTION
# =============================================================================


def generate_lesson_content(
    lesson: Lesson,
    client: LLMClient | None = None,
    timeout: float | None = None,
) -> dict[str, Any]:
    """Generate lesson content for a lesson row.

    Args:
        lesson: Lesson to write content for
        client: Optional pre-configured LLM client (for testing)
        timeout: Override the configured timeout (seconds)

    Returns:
        Lesson content payload (camelCase keys, as cached)

    Raises:
        LLMError: On any generation failure (already user-facing)
    """
    if client is None:
        client = LLMClient()
    if timeout is None:
        timeout = load_app_config().timeouts.lesson_content

    logger.info("generating_lesson_content", lesson_id=lesson.id, title=lesson.title)

    content = client.generate_json(build_lesson_prompt(lesson), timeout=timeout)

    if not content or not isinstance(content, dict):
        raise LLMResponseError("Invalid lesson content format received from AI")

    logger.info(
        "lesson_content_generated",
        lesson_id=lesson.id,
        questions=len(content.get("assessmentQuestions") or []),
    )
    return content
