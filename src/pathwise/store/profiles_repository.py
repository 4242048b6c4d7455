"""Repository functions for the profiles table.

Profiles are created by a store-side trigger when a user signs up; the app
only reads, upserts and lists them.
"""

from __future__ import annotations

from typing import Any

import structlog
from supabase import Client

from pathwise.store.client import execute
from pathwise.store.models import Profile

logger = structlog.get_logger(__name__)

TABLE = "profiles"


def get_profile(client: Client, user_id: str) -> Profile | None:
    """Get a profile by user ID.

    Returns:
        Profile if found, None otherwise (normal for brand-new users)
    """
    response = execute(
        client.table(TABLE).select("*").eq("id", user_id).limit(1),
        "profiles.get",
    )
    rows = response.data or []
    return Profile.from_row(rows[0]) if rows else None


def upsert_profile(
    client: Client, user_id: str, email: str, updates: dict[str, Any]
) -> Profile | None:
    """Insert or update a profile row.

    Args:
        user_id: Profile (and auth user) ID
        email: Account email, always written alongside the updates
        updates: Columns to set

    Returns:
        The stored profile, when the store returns it
    """
    row = {"id": user_id, "email": email or "", **updates}
    response = execute(client.table(TABLE).upsert(row), "profiles.upsert")
    logger.debug("profiles.upserted", user_id=user_id, fields=sorted(updates))
    rows = response.data or []
    return Profile.from_row(rows[0]) if rows else None


def list_learner_profiles(client: Client) -> list[Profile]:
    """List non-admin profiles, newest first."""
    response = execute(
        client.table(TABLE)
        .select("*")
        .eq("is_admin", False)
        .order("created_at", desc=True),
        "profiles.list_learners",
    )
    return [Profile.from_row(row) for row in response.data or []]
