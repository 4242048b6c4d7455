"""Progress aggregation.

Pure functions over progress rows, completions and lessons: quiz scoring,
running-average accuracy, percentages for roadmap/dashboard views and the
admin totals. Nothing here touches the store.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from pathwise.store.models import Lesson, LessonCompletion, UserProgress

PASSING_SCORE = 70
DEFAULT_TIME_SPENT = 30  # minutes credited per completed lesson

PASS_MESSAGE = "Great job!"
FAIL_MESSAGE = "Consider reviewing the material."


# =============================================================================
# SCORING
# =============================================================================


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positive values."""
    return int(math.floor(value + 0.5))


def _normalize_answer(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().lower()


def score_assessment(questions: Sequence[dict[str, Any]], answers: Sequence[Any]) -> int:
    """Score a lesson test.

    An answer is correct when it equals the expected answer after trimming
    and lowercasing. Missing answers count as wrong.

    Args:
        questions: Assessment questions, each with an ``answer`` key
        answers: User answers, by question index

    Returns:
        Percentage 0-100, rounded (0 when there are no questions)
    """
    if not questions:
        return 0

    correct = 0
    for index, question in enumerate(questions):
        given = answers[index] if index < len(answers) else None
        if _normalize_answer(given) == _normalize_answer(question.get("answer")):
            correct += 1

    return round_half_up(correct / len(questions) * 100)


def is_passing(score: int) -> bool:
    return score >= PASSING_SCORE


def result_message(score: int) -> str:
    """Feedback sentence for a test score."""
    return f"You scored {score}%! {PASS_MESSAGE if is_passing(score) else FAIL_MESSAGE}"


def apply_completion(
    progress: UserProgress, score: int, time_spent: int = DEFAULT_TIME_SPENT
) -> UserProgress:
    """Fold one completion into a progress record (in place).

    Accuracy is a running average over completed lessons.

    Returns:
        The same progress object, updated
    """
    old_completed = progress.completed_lessons
    new_completed = old_completed + 1

    progress.average_accuracy = (
        progress.average_accuracy * old_completed + score
    ) / new_completed
    progress.completed_lessons = new_completed
    progress.total_time_spent += time_spent
    return progress


# =============================================================================
# PERCENTAGES
# =============================================================================


def completion_percentage(progress: UserProgress) -> int:
    """Completed lessons over total lessons, as a rounded percentage."""
    return round_half_up(progress.completed_lessons / max(progress.total_lessons, 1) * 100)


def week_completion_percentage(progress: UserProgress, total_weeks: int) -> int:
    """Current week over the roadmap's week count."""
    if total_weeks <= 0:
        return 0
    return round_half_up(progress.current_week / total_weeks * 100)


def _completed_ids(completions: Iterable[LessonCompletion]) -> set[str]:
    return {c.lesson_id for c in completions}


def week_progress(
    lessons: Sequence[Lesson],
    completions: Iterable[LessonCompletion],
    week_number: int,
) -> int:
    """Share of a week's lessons that are completed."""
    week_lessons = [lesson for lesson in lessons if lesson.week_number == week_number]
    if not week_lessons:
        return 0
    done = _completed_ids(completions)
    completed = sum(1 for lesson in week_lessons if lesson.id in done)
    return round_half_up(completed / len(week_lessons) * 100)


def overall_progress(
    lessons: Sequence[Lesson], completions: Iterable[LessonCompletion]
) -> int:
    """Share of all roadmap lessons that are completed."""
    if not lessons:
        return 0
    done = _completed_ids(completions)
    completed = sum(1 for lesson in lessons if lesson.id in done)
    return round_half_up(completed / len(lessons) * 100)


def format_minutes(minutes: int) -> str:
    """Format a duration as ``"Xh Ym"``."""
    return f"{minutes // 60}h {minutes % 60}m"


# =============================================================================
# ADMIN AGGREGATES
# =============================================================================


@dataclass
class UserSummary:
    """Per-learner figures for the admin table."""

    progress_percentage: float
    total_time_spent: int
    average_accuracy: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "progress_percentage": round_half_up(self.progress_percentage),
            "total_time_spent": self.total_time_spent,
            "time_spent": format_minutes(self.total_time_spent),
            "average_accuracy": round_half_up(self.average_accuracy),
        }


@dataclass
class AdminTotals:
    total_users: int
    total_lessons_completed: int
    total_time_spent: int
    average_accuracy: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_users": self.total_users,
            "total_lessons_completed": self.total_lessons_completed,
            "total_time_spent": self.total_time_spent,
            "total_hours": self.total_time_spent // 60,
            "average_accuracy": round_half_up(self.average_accuracy),
        }


def _mean_accuracy(progress_rows: Sequence[UserProgress]) -> float:
    return sum(p.average_accuracy for p in progress_rows) / max(len(progress_rows), 1)


def user_summary(progress_rows: Sequence[UserProgress]) -> UserSummary:
    """Average completion, total time and mean accuracy over a user's roadmaps."""
    progress_percentage = sum(
        p.completed_lessons / max(p.total_lessons, 1) * 100 for p in progress_rows
    ) / max(len(progress_rows), 1)

    return UserSummary(
        progress_percentage=progress_percentage,
        total_time_spent=sum(p.total_time_spent for p in progress_rows),
        average_accuracy=_mean_accuracy(progress_rows),
    )


def admin_totals(progress_by_user: Sequence[Sequence[UserProgress]]) -> AdminTotals:
    """Totals across learners.

    Args:
        progress_by_user: One list of progress rows per learner (may be empty)
    """
    users = len(progress_by_user)
    average = (
        sum(_mean_accuracy(rows) for rows in progress_by_user) / users if users else 0.0
    )
    return AdminTotals(
        total_users=users,
        total_lessons_completed=sum(
            p.completed_lessons for rows in progress_by_user for p in rows
        ),
        total_time_spent=sum(p.total_time_spent for rows in progress_by_user for p in rows),
        average_accuracy=average,
    )
