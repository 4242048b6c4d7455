"""Request-scoped dependencies.

Every request gets its own store client carrying the caller's access
token, so row-level security applies to all store calls it makes.
Tests override these with fakes via ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import Any, Callable

from fastapi import Depends, Header, HTTPException, status
from supabase import Client

from pathwise.core.auth import AuthService
from pathwise.core.notifications import NotificationCenter
from pathwise.llm.client import LLMClient
from pathwise.store.client import create_admin_client, create_store_client

BEARER_PREFIX = "bearer "


def get_access_token(authorization: str | None = Header(default=None)) -> str | None:
    """Extract the bearer token from the Authorization header."""
    if not authorization:
        return None
    if authorization.lower().startswith(BEARER_PREFIX):
        token = authorization[len(BEARER_PREFIX):].strip()
        return token or None
    return None


def get_refresh_token(x_refresh_token: str | None = Header(default=None)) -> str | None:
    return x_refresh_token or None


def get_store_client(access_token: str | None = Depends(get_access_token)) -> Client:
    return create_store_client(access_token=access_token)


def get_admin_client_factory() -> Callable[[], Client]:
    """Service-role client factory; only called after the admin check."""
    return create_admin_client


def get_llm_client() -> LLMClient:
    return LLMClient()


def get_notifications() -> NotificationCenter:
    return NotificationCenter()


async def get_auth_service(
    client: Client = Depends(get_store_client),
    notifications: NotificationCenter = Depends(get_notifications),
    access_token: str | None = Depends(get_access_token),
    refresh_token: str | None = Depends(get_refresh_token),
) -> AuthService:
    """AuthService restored from the request's tokens (signed out if none)."""
    auth = AuthService(client, notifications)
    await auth.initialize(access_token, refresh_token)
    return auth


async def require_user(auth: AuthService = Depends(get_auth_service)) -> AuthService:
    """AuthService with a signed-in user, else 401."""
    if auth.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Your session has expired. Please sign in again.",
        )
    return auth


def notifications_payload(notifications: NotificationCenter) -> list[dict[str, Any]]:
    return [n.to_dict() for n in notifications.pending()]
