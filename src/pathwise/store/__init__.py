"""Hosted store access.

Provides:
- Client creation (anonymous, per-user, service role)
- Row types for profiles, roadmaps, lessons, user_progress, lesson_completions
- Repository functions, one module per table
"""

from pathwise.store.client import (
    StoreConfigError,
    StoreConnectionError,
    StoreError,
    StorePermissionError,
    create_admin_client,
    create_store_client,
    check_connection,
)
from pathwise.store.models import (
    Lesson,
    LessonCompletion,
    Profile,
    Roadmap,
    UserProgress,
)

__all__ = [
    "StoreConfigError",
    "StoreConnectionError",
    "StoreError",
    "StorePermissionError",
    "create_admin_client",
    "create_store_client",
    "check_connection",
    "Lesson",
    "LessonCompletion",
    "Profile",
    "Roadmap",
    "UserProgress",
]
