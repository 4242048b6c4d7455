"""Auth and session wrapper around the hosted auth service.

AuthService keeps the signed-in user, their profile and the new-user flag
for one client (one web request, or one CLI session). Failures are reported
through a NotificationCenter; connection problems get a Retry action.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog
from supabase import AuthError as SupabaseAuthError
from supabase import Client

from pathwise.config.app_config import TimeoutConfig, load_app_config
from pathwise.core.errors import (
    AuthError,
    PathwiseError,
    classify_error,
    format_auth_error,
    is_connection_issue,
)
from pathwise.core.notifications import NotificationAction, NotificationCenter
from pathwise.store.models import Profile
from pathwise.store.profiles_repository import get_profile, upsert_profile
from pathwise.utils.async_utils import run_blocking

logger = structlog.get_logger(__name__)

# Errors any auth operation may surface
AUTH_FAILURES = (SupabaseAuthError, PathwiseError, httpx.HTTPError)

MAX_PROFILE_WARNINGS = 2


@dataclass
class AuthUser:
    """Signed-in user as reported by the auth service."""

    id: str
    email: str
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_user(cls, user: Any) -> AuthUser:
        return cls(
            id=str(user.id),
            email=getattr(user, "email", None) or "",
            metadata=dict(getattr(user, "user_metadata", None) or {}),
        )


@dataclass
class AuthSession:
    access_token: str
    refresh_token: str | None = None
    expires_at: int | None = None

    @classmethod
    def from_session(cls, session: Any) -> AuthSession:
        return cls(
            access_token=session.access_token,
            refresh_token=getattr(session, "refresh_token", None),
            expires_at=getattr(session, "expires_at", None),
        )


class AuthService:
    """Session state and auth operations for one store client."""

    def __init__(
        self,
        client: Client,
        notifications: NotificationCenter | None = None,
        timeouts: TimeoutConfig | None = None,
    ):
        self._client = client
        self.notifications = notifications or NotificationCenter()
        self._timeouts = timeouts or load_app_config().timeouts

        self.user: AuthUser | None = None
        self.session: AuthSession | None = None
        self.profile: Profile | None = None
        self.is_new_user = False
        self.loading = True
        self._profile_fetch_attempts = 0

    @property
    def client(self) -> Client:
        """Store client bound to this session."""
        return self._client

    # =========================================================================
    # SESSION
    # =========================================================================

    async def initialize(
        self,
        access_token: str | None = None,
        refresh_token: str | None = None,
    ) -> AuthUser | None:
        """Restore a session from tokens. Never raises.

        Without tokens the service is simply signed out.
        """
        try:
            if not access_token:
                self._reset()
                return None

            if refresh_token:
                response = await run_blocking(
                    self._client.auth.set_session,
                    access_token,
                    refresh_token,
                    timeout=self._timeouts.auth_session,
                    timeout_message="Auth session request timed out",
                )
                self._set_session(response.user, response.session)
            else:
                response = await run_blocking(
                    self._client.auth.get_user,
                    access_token,
                    timeout=self._timeouts.auth_session,
                    timeout_message="Auth session request timed out",
                )
                user = response.user if response else None
                self._set_session(user, None)
                if user is not None:
                    self.session = AuthSession(access_token=access_token)
                    self._client.postgrest.auth(access_token)

            logger.debug("auth.session_restored", has_user=self.user is not None)

            if self.user is not None:
                await self.fetch_profile(self.user.id)
            else:
                self.profile = None
            return self.user

        except AUTH_FAILURES as e:
            logger.error("auth.initialize_failed", error=str(e))
            message = format_auth_error(e)
            if is_connection_issue(message):
                self.notifications.show_warning(
                    "Connection Issue",
                    "Having trouble connecting. You can try refreshing the page.",
                    action=NotificationAction(
                        "Retry", lambda: self.initialize(access_token, refresh_token)
                    ),
                )
            elif isinstance(e, SupabaseAuthError):
                self.notifications.show_error("Authentication Error", message)
            else:
                self.notifications.show_error("Initialization Error", message)
            self._reset()
            return None

        finally:
            self.loading = False

    async def on_auth_state_change(self, event: str, session: Any | None) -> None:
        """Apply an auth event (SIGNED_IN, SIGNED_UP, SIGNED_OUT, ...)."""
        user = getattr(session, "user", None) if session is not None else None
        logger.debug("auth.state_changed", auth_event=event, has_user=user is not None)

        if user is not None:
            self._set_session(user, session)
            if event == "SIGNED_UP":
                self.is_new_user = True
            await self.fetch_profile(self.user.id)
        else:
            self.user = None
            self.session = None
            self.profile = None
            self.is_new_user = False

        self.loading = False

    # =========================================================================
    # PROFILE
    # =========================================================================

    async def fetch_profile(self, user_id: str, is_retry: bool = False) -> Profile | None:
        """Load the user's profile. Never raises.

        A missing row leaves the profile empty (normal right after sign-up).
        """
        try:
            profile = await run_blocking(
                get_profile,
                self._client,
                user_id,
                timeout=self._timeouts.profile_fetch,
                timeout_message="Profile fetch timed out",
            )
        except PathwiseError as e:
            failed_before = self._profile_fetch_attempts
            self._profile_fetch_attempts += 1
            logger.error(
                "auth.profile_fetch_failed",
                user_id=user_id,
                retry=is_retry,
                attempts=self._profile_fetch_attempts,
                error=e.message,
            )

            message = format_auth_error(e)
            if "timeout" in message.lower():
                if not is_retry and failed_before < MAX_PROFILE_WARNINGS:
                    self.notifications.show_warning(
                        "Loading Issue",
                        "Profile loading is taking longer than expected. "
                        "You can continue using the app.",
                        action=NotificationAction("Retry", self.retry_profile_fetch),
                    )
            else:
                self.notifications.show_error("Profile Error", message)

            self.profile = None
            return None

        self._profile_fetch_attempts = 0
        self.profile = profile
        if profile is None:
            logger.info("auth.profile_missing", user_id=user_id)
        return profile

    async def retry_profile_fetch(self) -> Profile | None:
        if self.user is None:
            return None
        return await self.fetch_profile(self.user.id, is_retry=True)

    async def update_profile(self, updates: dict[str, Any]) -> Profile | None:
        """Upsert profile fields for the signed-in user and reload it.

        Raises:
            AuthError: If nobody is signed in, or the update failed
        """
        if self.user is None:
            raise AuthError("No user logged in")

        try:
            await run_blocking(
                upsert_profile,
                self._client,
                self.user.id,
                self.user.email,
                updates,
                timeout=self._timeouts.store_query,
            )
        except PathwiseError as e:
            raise self._failure("Update Failed", e) from e

        return await self.fetch_profile(self.user.id)

    # =========================================================================
    # SIGN UP / IN / OUT
    # =========================================================================

    async def sign_up(self, email: str, password: str, full_name: str) -> AuthUser:
        """Create an account; the profile row is created by the store.

        Raises:
            AuthError: With a user-facing message
        """
        self.loading = True
        try:
            response = await run_blocking(
                self._client.auth.sign_up,
                {
                    "email": email,
                    "password": password,
                    "options": {"data": {"full_name": full_name}},
                },
                timeout=self._timeouts.auth_session,
            )
            if response.user is None:
                raise AuthError("Failed to create user account. Please try again.")

            self._set_session(response.user, response.session)
            await self.fetch_profile(self.user.id)
            self.is_new_user = True
            logger.info("auth.signed_up", user_id=self.user.id)
            return self.user

        except AUTH_FAILURES as e:
            self.is_new_user = False
            raise self._failure("Sign Up Failed", e) from e

        finally:
            self.loading = False

    async def sign_in(self, email: str, password: str) -> AuthUser:
        """Sign in with email and password.

        Raises:
            AuthError: With a user-facing message
        """
        self.loading = True
        self.is_new_user = False
        try:
            response = await run_blocking(
                self._client.auth.sign_in_with_password,
                {"email": email, "password": password},
                timeout=self._timeouts.auth_session,
            )
            if response.user is None:
                raise AuthError("Sign in failed. Please try again.")

            self._set_session(response.user, response.session)
            await self.fetch_profile(self.user.id)
            logger.info("auth.signed_in", user_id=self.user.id)
            return self.user

        except AUTH_FAILURES as e:
            raise self._failure("Sign In Failed", e) from e

        finally:
            self.loading = False

    async def sign_out(self) -> None:
        """Sign out and clear local state.

        Raises:
            AuthError: With a user-facing message
        """
        self.is_new_user = False
        self._profile_fetch_attempts = 0
        try:
            await run_blocking(self._client.auth.sign_out, timeout=self._timeouts.auth_session)
        except AUTH_FAILURES as e:
            raise self._failure("Sign Out Failed", e) from e

        user_id = self.user.id if self.user else None
        self._reset()
        logger.info("auth.signed_out", user_id=user_id)

    def set_is_new_user(self, value: bool) -> None:
        self.is_new_user = value

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _set_session(self, user: Any | None, session: Any | None) -> None:
        self.user = AuthUser.from_user(user) if user is not None else None
        self.session = AuthSession.from_session(session) if session is not None else None
        if self.session is not None:
            self._client.postgrest.auth(self.session.access_token)

    def _reset(self) -> None:
        self.user = None
        self.session = None
        self.profile = None

    def _failure(self, title: str, error: Exception) -> AuthError:
        """Notify about a failed operation and build the error to re-raise."""
        logger.error("auth.operation_failed", operation=title, error=str(error))
        message = format_auth_error(error)
        self.notifications.show_error(title, message)
        return AuthError(message, title=title, category=classify_error(error))
