"""Administration: learner overview and account deletion.

Every operation requires an admin profile. Deleting a user goes through
the auth admin API, which needs the service role key; the store cascades
the deletion to everything the user owns.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog
from supabase import AuthError as SupabaseAuthError
from supabase import Client

from pathwise.config.app_config import load_app_config
from pathwise.core.errors import PathwiseError, PermissionDeniedError
from pathwise.core.progress import AdminTotals, admin_totals, user_summary
from pathwise.store.models import Profile, UserProgress
from pathwise.store.profiles_repository import list_learner_profiles
from pathwise.store.progress_repository import list_progress_for_user
from pathwise.utils.async_utils import run_blocking

logger = structlog.get_logger(__name__)


@dataclass
class LearnerOverview:
    profile: Profile
    progress: list[UserProgress] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "profile": self.profile.to_dict(),
            "progress": [p.to_dict() for p in self.progress],
            "summary": user_summary(self.progress).to_dict(),
        }


@dataclass
class AdminOverview:
    learners: list[LearnerOverview]
    totals: AdminTotals

    def to_dict(self) -> dict[str, Any]:
        return {
            "users": [learner.to_dict() for learner in self.learners],
            "totals": self.totals.to_dict(),
        }


def require_admin(profile: Profile | None) -> None:
    """Raise unless the profile belongs to an administrator."""
    if profile is None or not profile.is_admin:
        raise PermissionDeniedError("You don't have permission to access this page.")


async def list_learners(client: Client, admin: Profile | None) -> AdminOverview:
    """List non-admin users with their progress rows and totals.

    A learner whose progress cannot be loaded is listed without progress.
    """
    require_admin(admin)
    timeout = load_app_config().timeouts.store_query

    profiles = await run_blocking(list_learner_profiles, client, timeout=timeout)

    learners = []
    for profile in profiles:
        try:
            progress = await run_blocking(
                list_progress_for_user, client, profile.id, timeout=timeout
            )
        except PathwiseError as e:
            logger.error("admin_progress_fetch_failed", user_id=profile.id, error=e.message)
            progress = []
        learners.append(LearnerOverview(profile=profile, progress=progress))

    totals = admin_totals([learner.progress for learner in learners])
    logger.info("admin_overview_loaded", users=totals.total_users)
    return AdminOverview(learners=learners, totals=totals)


async def delete_user(admin_client: Client, admin: Profile | None, user_id: str) -> None:
    """Delete a user account through the auth admin API.

    Args:
        admin_client: Client created with the service role key
        admin: Profile of the caller
        user_id: Account to delete

    Raises:
        PermissionDeniedError: If the caller is not an admin
        PathwiseError: "Failed to delete user"
    """
    require_admin(admin)
    try:
        await run_blocking(
            admin_client.auth.admin.delete_user,
            user_id,
            timeout=load_app_config().timeouts.store_query,
        )
    except (SupabaseAuthError, PathwiseError) as e:
        logger.error("admin_delete_user_failed", user_id=user_id, error=str(e))
        raise PathwiseError("Failed to delete user", title="Delete Failed") from e

    logger.info("admin_user_deleted", user_id=user_id)
