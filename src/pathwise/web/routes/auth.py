"""Auth endpoints: sign up, sign in, sign out, current session."""

from dataclasses import asdict

from fastapi import APIRouter, Depends

from pathwise.core.auth import AuthService
from pathwise.web.deps import get_auth_service, notifications_payload, require_user
from pathwise.web.schemas import (
    SessionResponse,
    SignInRequest,
    SignUpRequest,
    StatusResponse,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def session_response(auth: AuthService) -> SessionResponse:
    """Serialize the auth state of a request."""
    return SessionResponse(
        user=asdict(auth.user) if auth.user else None,
        session=asdict(auth.session) if auth.session else None,
        profile=auth.profile.to_dict() if auth.profile else None,
        is_new_user=auth.is_new_user,
        notifications=notifications_payload(auth.notifications),
    )


@router.post("/signup", response_model=SessionResponse, status_code=201)
async def sign_up(
    body: SignUpRequest, auth: AuthService = Depends(get_auth_service)
) -> SessionResponse:
    """Create an account."""
    await auth.sign_up(body.email, body.password, body.full_name)
    return session_response(auth)


@router.post("/signin", response_model=SessionResponse)
async def sign_in(
    body: SignInRequest, auth: AuthService = Depends(get_auth_service)
) -> SessionResponse:
    """Sign in with email and password."""
    await auth.sign_in(body.email, body.password)
    return session_response(auth)


@router.post("/signout", response_model=StatusResponse)
async def sign_out(auth: AuthService = Depends(require_user)) -> StatusResponse:
    """Sign out the current session."""
    await auth.sign_out()
    return StatusResponse(
        status="signed_out", notifications=notifications_payload(auth.notifications)
    )


@router.get("/session", response_model=SessionResponse)
async def get_session(auth: AuthService = Depends(get_auth_service)) -> SessionResponse:
    """Current user and profile (user is null when signed out)."""
    return session_response(auth)
