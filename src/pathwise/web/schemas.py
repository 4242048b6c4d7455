"""Pydantic schemas for the Web API.

Request bodies are validated here; response payloads mirror the
``to_dict()`` output of the core view objects.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = "0.1.0"
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class ErrorResponse(BaseModel):
    """Body of every failed request."""

    category: str
    title: str
    message: str
    retryable: bool = False


class NotificationResponse(BaseModel):
    id: str
    type: str
    title: str
    message: str | None = None
    duration: int
    action: str | None = None


# =============================================================================
# AUTH / PROFILE
# =============================================================================


class SignUpRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1)
    full_name: str = Field(default="", max_length=200)


class SignInRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    id: str
    email: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class SessionTokens(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_at: int | None = None


class ProfileResponse(BaseModel):
    id: str
    email: str
    full_name: str | None = None
    avatar_url: str | None = None
    is_admin: bool = False
    goal: str | None = None
    preferences: dict[str, Any] = Field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""


class SessionResponse(BaseModel):
    """Current auth state."""

    user: UserResponse | None = None
    session: SessionTokens | None = None
    profile: ProfileResponse | None = None
    is_new_user: bool = False
    notifications: list[NotificationResponse] = Field(default_factory=list)


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    full_name: str | None = Field(default=None, max_length=200)
    avatar_url: str | None = None
    goal: str | None = None
    preferences: dict[str, Any] | None = None


class ProfileEnvelope(BaseModel):
    profile: ProfileResponse | None = None
    notifications: list[NotificationResponse] = Field(default_factory=list)


class StatusResponse(BaseModel):
    status: str
    notifications: list[NotificationResponse] = Field(default_factory=list)


# =============================================================================
# ONBOARDING
# =============================================================================


class GoalRequest(BaseModel):
    goal: str = Field(..., max_length=500)


class QuestionItem(BaseModel):
    question: str
    options: list[str] = Field(default_factory=list)


class QuestionsResponse(BaseModel):
    goal: str
    questions: list[QuestionItem]
    notifications: list[NotificationResponse] = Field(default_factory=list)


class RoadmapCreateRequest(BaseModel):
    goal: str = Field(..., min_length=1, max_length=500)
    questions: list[QuestionItem] = Field(default_factory=list)
    answers: dict[str, str] = Field(default_factory=dict)


class RoadmapCreatedResponse(BaseModel):
    roadmap: dict[str, Any]
    notifications: list[NotificationResponse] = Field(default_factory=list)


# =============================================================================
# ROADMAP
# =============================================================================


class RoadmapViewResponse(BaseModel):
    roadmap: dict[str, Any] | None = None
    weeks: list[dict[str, Any]] = Field(default_factory=list)
    overall_progress: int = 0
    completed_lessons: int = 0
    total_lessons: int = 0
    notifications: list[NotificationResponse] = Field(default_factory=list)


class AlterRoadmapRequest(BaseModel):
    request: str = Field(..., max_length=2000)


# =============================================================================
# LESSONS
# =============================================================================


class LessonsResponse(BaseModel):
    roadmap: dict[str, Any] | None = None
    weeks: list[dict[str, Any]] = Field(default_factory=list)


class LessonResponse(BaseModel):
    lesson: dict[str, Any]
    content: dict[str, Any]
    completed: bool = False
    previous_id: str | None = None
    next_id: str | None = None
    position: int
    total: int


class CompletionResponse(BaseModel):
    progress: dict[str, Any] | None = None
    notifications: list[NotificationResponse] = Field(default_factory=list)


class AnswersSubmission(BaseModel):
    answers: list[str] = Field(default_factory=list)


class AssessmentResultResponse(BaseModel):
    score: int
    passed: bool
    message: str
    total_questions: int
    notifications: list[NotificationResponse] = Field(default_factory=list)


# =============================================================================
# DASHBOARD / ADMIN
# =============================================================================


class DashboardResponse(BaseModel):
    roadmap: dict[str, Any] | None = None
    progress: dict[str, Any] | None = None
    recent_completions: list[dict[str, Any]] = Field(default_factory=list)
    stats: dict[str, Any] | None = None


class AdminUsersResponse(BaseModel):
    users: list[dict[str, Any]]
    totals: dict[str, Any]
