"""Database module for local SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Lesson content cache
"""

from pathwise.db.content_cache import (
    cache_lesson_content,
    clear_lesson_cache,
    get_cached_lesson_content,
    list_cache_keys,
)
from pathwise.db.database import get_db, init_db

__all__ = [
    "cache_lesson_content",
    "clear_lesson_cache",
    "get_cached_lesson_content",
    "list_cache_keys",
    "get_db",
    "init_db",
]
