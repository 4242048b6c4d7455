"""Profile endpoints."""

from fastapi import APIRouter, Depends

from pathwise.core.auth import AuthService
from pathwise.web.deps import notifications_payload, require_user
from pathwise.web.schemas import ProfileEnvelope, ProfileUpdate

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("", response_model=ProfileEnvelope)
async def get_profile(auth: AuthService = Depends(require_user)) -> ProfileEnvelope:
    """Get the caller's profile (null right after sign-up)."""
    return ProfileEnvelope(
        profile=auth.profile.to_dict() if auth.profile else None,
        notifications=notifications_payload(auth.notifications),
    )


@router.patch("", response_model=ProfileEnvelope)
async def update_profile(
    body: ProfileUpdate, auth: AuthService = Depends(require_user)
) -> ProfileEnvelope:
    """Update fields of the caller's profile."""
    updates = body.model_dump(exclude_unset=True)
    profile = await auth.update_profile(updates)
    return ProfileEnvelope(
        profile=profile.to_dict() if profile else None,
        notifications=notifications_payload(auth.notifications),
    )
