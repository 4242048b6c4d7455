"""Fixtures for F3 tests - services over the store."""

from dataclasses import dataclass
from typing import Any

import pytest

from fakes import LESSON_REPLY, ROADMAP_REPLY
from pathwise.core.auth import AuthUser
from pathwise.core.roadmap_generator import lessons_from_weeks


@dataclass
class Seeded:
    user: AuthUser
    roadmap: dict[str, Any]
    lessons: list[dict[str, Any]]
    progress: dict[str, Any]


@pytest.fixture
def learner(store) -> AuthUser:
    """Signed-up learner (auth user + profile row)."""
    return AuthUser.from_user(store.add_user("ada@example.com", full_name="Ada"))


@pytest.fixture
def seeded(store, learner) -> Seeded:
    """Learner with a two-week roadmap, three lessons and zeroed progress."""
    roadmap = store.insert(
        "roadmaps",
        {
            "user_id": learner.id,
            "title": "Learning Roadmap: Python",
            "goal": "Python",
            "weeks": ROADMAP_REPLY,
            "questions": [],
            "answers": {},
        },
    )
    lessons = [store.insert("lessons", row) for row in lessons_from_weeks(roadmap["id"], ROADMAP_REPLY)]
    progress = store.insert(
        "user_progress",
        {
            "user_id": learner.id,
            "roadmap_id": roadmap["id"],
            "total_lessons": len(lessons),
            "completed_lessons": 0,
            "total_time_spent": 0,
            "average_accuracy": 0,
            "current_week": 1,
        },
    )
    return Seeded(user=learner, roadmap=roadmap, lessons=lessons, progress=progress)


@pytest.fixture
def lesson_content() -> dict[str, Any]:
    return dict(LESSON_REPLY)
