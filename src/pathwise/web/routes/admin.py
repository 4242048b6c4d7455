"""Admin endpoints (admin profiles only)."""

from typing import Callable

from fastapi import APIRouter, Depends
from supabase import Client

from pathwise.core import admin
from pathwise.core.auth import AuthService
from pathwise.web.deps import get_admin_client_factory, require_user
from pathwise.web.schemas import AdminUsersResponse, StatusResponse

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/users", response_model=AdminUsersResponse)
async def list_users(auth: AuthService = Depends(require_user)) -> AdminUsersResponse:
    """Learners with their progress and platform totals."""
    overview = await admin.list_learners(auth.client, auth.profile)
    return AdminUsersResponse(**overview.to_dict())


@router.delete("/users/{user_id}", response_model=StatusResponse)
async def delete_user(
    user_id: str,
    auth: AuthService = Depends(require_user),
    admin_client_factory: Callable[[], Client] = Depends(get_admin_client_factory),
) -> StatusResponse:
    """Delete a user account and everything it owns."""
    admin.require_admin(auth.profile)
    await admin.delete_user(admin_client_factory(), auth.profile, user_id)
    return StatusResponse(status="deleted")
