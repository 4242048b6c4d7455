"""Hosted store connection management.

Creates Supabase clients for the three access levels used by the app:
- anonymous (sign-up / sign-in)
- per-user (carries the user's access token so row-level security applies)
- service role (admin-only operations such as deleting an auth user)

Also provides the query wrapper every repository goes through, so that
store failures surface as StoreError.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from supabase import Client, ClientOptions, PostgrestAPIError, create_client

from pathwise.config.app_config import StoreConfig, load_app_config
from pathwise.core.errors import ErrorCategory, PathwiseError

logger = structlog.get_logger(__name__)

# Postgres / PostgREST codes with a specific meaning for callers
RLS_VIOLATION_CODES = {"42501"}
UNIQUE_VIOLATION_CODE = "23505"


class StoreConfigError(PathwiseError):
    """Store credentials missing or malformed."""

    title = "Configuration Error"


class StoreError(PathwiseError):
    """A store request failed."""

    title = "Database Error"

    def __init__(self, message: str, code: str | None = None, *, title: str | None = None):
        super().__init__(message, title=title)
        self.code = code


class StorePermissionError(StoreError):
    """Row-level security rejected the request."""

    category = ErrorCategory.FORBIDDEN
    title = "Access Denied"


class StoreConnectionError(StoreError):
    """Store could not be reached (network failure or timeout)."""

    category = ErrorCategory.NETWORK
    retryable = True


def _validate_credentials(url: str | None, key: str | None) -> tuple[str, str]:
    if not url or not key:
        raise StoreConfigError(
            "Missing Supabase environment variables. Please check your .env file."
        )
    if not url.startswith("https://") or ".supabase.co" not in url:
        raise StoreConfigError(
            "Invalid Supabase URL format. Expected format: "
            "https://your-project.supabase.co"
        )
    return url, key


def _client_options(config: StoreConfig, timeout: float) -> ClientOptions:
    return ClientOptions(
        headers={"X-Client-Info": config.client_info},
        auto_refresh_token=False,
        persist_session=False,
        postgrest_client_timeout=timeout,
    )


def create_store_client(
    config: StoreConfig | None = None,
    access_token: str | None = None,
) -> Client:
    """Create a client with the public (anon) key.

    Args:
        config: Store settings (loaded from app config if not provided)
        access_token: If given, database requests run as that user

    Returns:
        Supabase client

    Raises:
        StoreConfigError: If URL or key are missing or malformed
    """
    app_config = load_app_config()
    if config is None:
        config = app_config.store

    url, key = _validate_credentials(config.get_url(), config.get_anon_key())
    client = create_client(url, key, options=_client_options(config, app_config.timeouts.store_query))

    if access_token:
        client.postgrest.auth(access_token)

    logger.debug("store.client_created", url=url, authenticated=bool(access_token))
    return client


def create_admin_client(config: StoreConfig | None = None) -> Client:
    """Create a client with the service role key (bypasses row security).

    Raises:
        StoreConfigError: If the service role key is not configured
    """
    app_config = load_app_config()
    if config is None:
        config = app_config.store

    url, key = _validate_credentials(config.get_url(), config.get_service_role_key())
    return create_client(url, key, options=_client_options(config, app_config.timeouts.store_query))


def execute(query: Any, action: str) -> Any:
    """Run a query builder and translate failures.

    Args:
        query: Any PostgREST request builder
        action: Short name for logging (e.g. "roadmaps.insert")

    Returns:
        The API response (``.data`` holds the rows)

    Raises:
        StorePermissionError: If row-level security rejected the request
        StoreConnectionError: On network failure or timeout
        StoreError: On any other store error
    """
    try:
        return query.execute()
    except PostgrestAPIError as e:
        code = str(e.code) if e.code else None
        message = e.message or str(e)
        logger.error("store.query_failed", action=action, code=code, error=message)
        if code in RLS_VIOLATION_CODES:
            raise StorePermissionError(message, code=code) from e
        raise StoreError(message, code=code) from e
    except httpx.TimeoutException as e:
        logger.error("store.query_timeout", action=action)
        raise StoreConnectionError("Request timeout", code="timeout") from e
    except httpx.HTTPError as e:
        logger.error("store.query_network_error", action=action, error=str(e))
        raise StoreConnectionError(
            "Network connection error. Please check your internet connection and try again.",
            code="network_error",
        ) from e


def check_connection(client: Client) -> bool:
    """Check the store answers a trivial query.

    Returns:
        True if a one-row select on profiles succeeds, False otherwise
    """
    try:
        execute(client.table("profiles").select("id").limit(1), "profiles.ping")
    except StoreError as e:
        logger.error("store.connection_test_failed", error=e.message)
        return False
    logger.info("store.connection_ok")
    return True
