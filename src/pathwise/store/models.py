"""Row types for the hosted store tables.

The store owns these rows; constraints (unique progress per user+roadmap,
unique completion per user+lesson, cascades) are enforced server-side.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class Profile:
    """Per-user account record."""

    id: str
    email: str
    full_name: str | None = None
    avatar_url: str | None = None
    is_admin: bool = False
    goal: str | None = None
    preferences: dict[str, Any] = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Profile:
        return cls(
            id=row["id"],
            email=row.get("email") or "",
            full_name=row.get("full_name"),
            avatar_url=row.get("avatar_url"),
            is_admin=bool(row.get("is_admin")),
            goal=row.get("goal"),
            preferences=row.get("preferences") or {},
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Roadmap:
    """AI-generated roadmap for a goal."""

    id: str
    user_id: str
    title: str
    goal: str
    weeks: list[dict[str, Any]] = field(default_factory=list)
    questions: Any = None
    answers: dict[str, Any] = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Roadmap:
        weeks = row.get("weeks")
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            title=row.get("title") or "",
            goal=row.get("goal") or "",
            weeks=weeks if isinstance(weeks, list) else [],
            questions=row.get("questions"),
            answers=row.get("answers") or {},
            created_at=row.get("created_at") or "",
            updated_at=row.get("updated_at") or "",
        )

    @property
    def total_weeks(self) -> int:
        return len(self.weeks)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Lesson:
    """One roadmap topic."""

    id: str
    roadmap_id: str
    week_number: int
    title: str
    lesson_objective: str
    estimated_time: str
    order_index: int = 0
    content: dict[str, Any] | None = None
    created_at: str = ""

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> Lesson:
        return cls(
            id=row["id"],
            roadmap_id=row["roadmap_id"],
            week_number=int(row.get("week_number") or 1),
            title=row.get("title") or "",
            lesson_objective=row.get("lesson_objective") or "",
            estimated_time=row.get("estimated_time") or "",
            order_index=int(row.get("order_index") or 0),
            content=row.get("content") or None,
            created_at=row.get("created_at") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class UserProgress:
    """Aggregate counters per user per roadmap."""

    id: str
    user_id: str
    roadmap_id: str
    total_lessons: int = 0
    completed_lessons: int = 0
    total_time_spent: int = 0  # minutes
    average_accuracy: float = 0.0  # 0-100
    current_week: int = 1
    updated_at: str = ""

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> UserProgress:
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            roadmap_id=row["roadmap_id"],
            total_lessons=int(row.get("total_lessons") or 0),
            completed_lessons=int(row.get("completed_lessons") or 0),
            total_time_spent=int(row.get("total_time_spent") or 0),
            average_accuracy=float(row.get("average_accuracy") or 0),
            current_week=int(row.get("current_week") or 1),
            updated_at=row.get("updated_at") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class LessonCompletion:
    """Completion of one lesson by one user."""

    id: str
    user_id: str
    lesson_id: str
    score: int | None = None
    time_spent: int | None = None
    answers: Any = None
    completed_at: str = ""
    lesson_title: str | None = None  # populated by joined queries

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> LessonCompletion:
        joined = row.get("lessons") or {}
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            lesson_id=row["lesson_id"],
            score=row.get("score"),
            time_spent=row.get("time_spent"),
            answers=row.get("answers"),
            completed_at=row.get("completed_at") or "",
            lesson_title=joined.get("title") if isinstance(joined, dict) else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
