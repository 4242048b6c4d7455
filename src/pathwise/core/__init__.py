"""Core business logic.

Modules:
- errors: failure categories, user-facing messages, exception hierarchy
- notifications: dismissable notifications with optional retry actions
- auth: session wrapper around the hosted auth service
- question_generator / roadmap_generator / lesson_content_generator: AI generation
- onboarding: goal -> questions -> roadmap flow
- progress: scoring and progress aggregation
- lessons / roadmaps / dashboard / admin: per-view services
"""

__all__ = [
    "errors",
    "notifications",
    "auth",
    "question_generator",
    "roadmap_generator",
    "lesson_content_generator",
    "onboarding",
    "progress",
    "lessons",
    "roadmaps",
    "dashboard",
    "admin",
]
