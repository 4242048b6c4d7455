"""Failure classification.

Every failure surfaced to a user falls into a small set of categories.
Upstream errors (auth service, store, AI endpoint) are matched by code and
message and translated into a user-facing sentence; nothing here retries.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

GENERIC_ERROR_MESSAGE = (
    "An unexpected error occurred. Please try again or contact support "
    "if the problem persists."
)


class ErrorCategory(str, Enum):
    """User-facing failure categories."""

    INVALID_CREDENTIALS = "invalid_credentials"
    NETWORK = "network"
    RATE_LIMIT = "rate_limit"
    MALFORMED_AI_OUTPUT = "malformed_ai_output"
    SERVICE_UNAVAILABLE = "service_unavailable"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    GENERIC = "generic"


# =============================================================================
# EXCEPTIONS
# =============================================================================


class PathwiseError(Exception):
    """Base error for all PathWise failures."""

    category: ErrorCategory = ErrorCategory.GENERIC
    title: str = "Something Went Wrong"
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        title: str | None = None,
        category: ErrorCategory | None = None,
    ):
        super().__init__(message)
        self.message = message
        if title is not None:
            self.title = title
        if category is not None:
            self.category = category

    def to_dict(self) -> dict[str, Any]:
        """Serialize for API error bodies."""
        return {
            "category": self.category.value,
            "title": self.title,
            "message": self.message,
            "retryable": self.retryable,
        }


class RequestTimeoutError(PathwiseError):
    """A bounded call did not finish in time."""

    category = ErrorCategory.NETWORK
    title = "Connection Issue"
    retryable = True


class AuthError(PathwiseError):
    """Authentication or session failure."""

    category = ErrorCategory.INVALID_CREDENTIALS
    title = "Authentication Error"


class NotFoundError(PathwiseError):
    """A requested row does not exist (or is hidden by row security)."""

    category = ErrorCategory.NOT_FOUND
    title = "Not Found"


class PermissionDeniedError(PathwiseError):
    """Caller lacks the privileges for an operation."""

    category = ErrorCategory.FORBIDDEN
    title = "Access Denied"


class ValidationError(PathwiseError):
    """Input rejected before any upstream call."""

    title = "Invalid Request"


# =============================================================================
# AUTH ERROR FORMATTING
# =============================================================================

_AUTH_CODE_MESSAGES: dict[str, str] = {
    "invalid_credentials": (
        "Invalid email or password. Please check your credentials and try again."
    ),
    "user_already_exists": (
        "An account with this email already exists. Please sign in instead "
        "or use a different email."
    ),
    "email_address_already_exists": (
        "An account with this email already exists. Please sign in instead "
        "or use a different email."
    ),
    "weak_password": (
        "Password is too weak. Please use at least 6 characters with a mix "
        "of letters and numbers."
    ),
    "invalid_email": "Please enter a valid email address.",
    "email_not_confirmed": (
        "Please check your email and click the confirmation link before signing in."
    ),
    "too_many_requests": (
        "Too many login attempts. Please wait a few minutes before trying again."
    ),
    "signup_disabled": (
        "New user registration is currently disabled. Please contact support."
    ),
    "email_address_invalid": (
        "The email address format is invalid. Please enter a valid email."
    ),
    "password_too_short": "Password must be at least 6 characters long.",
    "user_not_found": (
        "No account found with this email address. Please sign up first."
    ),
    "session_not_found": "Your session has expired. Please sign in again.",
    "refresh_token_not_found": "Authentication expired. Please sign in again.",
    "invalid_request": "Invalid request. Please check your information and try again.",
    "network_error": (
        "Network connection error. Please check your internet connection and try again."
    ),
}

# Ordered: first match wins
_AUTH_MESSAGE_PATTERNS: list[tuple[tuple[str, ...], str]] = [
    (
        ("invalid login credentials",),
        "Invalid email or password. Please check your credentials and try again.",
    ),
    (
        ("user already registered",),
        "An account with this email already exists. Please sign in instead.",
    ),
    (
        ("email not confirmed",),
        "Please check your email and click the confirmation link before signing in.",
    ),
    (("weak password",), "Password is too weak. Please use at least 6 characters."),
    (("invalid email",), "Please enter a valid email address."),
    (
        ("timeout", "timed out"),
        "Connection timeout. Please check your internet connection and try again.",
    ),
    (
        ("network",),
        "Network connection error. Please check your internet connection and try again.",
    ),
    (
        ("rate limit",),
        "Too many attempts. Please wait a few minutes before trying again.",
    ),
    (("database",), "Database connection error. Please try again in a moment."),
    (
        ("not_found", "404"),
        "Service temporarily unavailable. Please try again in a moment.",
    ),
]


def _error_code(error: Any) -> str:
    code = getattr(error, "code", None)
    return str(code) if code else ""


def _error_message(error: Any) -> str:
    if isinstance(error, str):
        return error
    message = getattr(error, "message", None)
    if isinstance(message, str):
        return message
    return str(error) if error is not None else ""


def format_auth_error(error: Any) -> str:
    """Translate an auth or store error into a user-facing sentence.

    Args:
        error: Exception (or any object with ``code``/``message``), or a string

    Returns:
        Message suitable for a notification
    """
    if error is None:
        return "An unexpected error occurred"

    code = _error_code(error)
    if code in _AUTH_CODE_MESSAGES:
        return _AUTH_CODE_MESSAGES[code]

    message = _error_message(error)
    lowered = message.lower()

    for needles, friendly in _AUTH_MESSAGE_PATTERNS:
        if any(needle in lowered for needle in needles):
            return friendly

    # Keep short, already readable upstream messages
    if message and len(message) < 100 and "Error:" not in message:
        return message

    return GENERIC_ERROR_MESSAGE


def is_connection_issue(message: str) -> bool:
    """Whether a formatted message describes a transient connection problem."""
    lowered = message.lower()
    return any(word in lowered for word in ("timeout", "network", "unavailable"))


def classify_error(error: Any) -> ErrorCategory:
    """Assign a failure category from an exception or message.

    PathwiseError subclasses carry their own category; anything else is
    matched on its code and message text.
    """
    if isinstance(error, PathwiseError):
        return error.category

    code = _error_code(error)
    if code in ("invalid_credentials", "user_not_found"):
        return ErrorCategory.INVALID_CREDENTIALS
    if code == "too_many_requests" or code == "429":
        return ErrorCategory.RATE_LIMIT
    if code == "network_error":
        return ErrorCategory.NETWORK

    lowered = _error_message(error).lower()
    if "invalid login credentials" in lowered or "invalid api key" in lowered:
        return ErrorCategory.INVALID_CREDENTIALS
    if "rate limit" in lowered or "too many" in lowered:
        return ErrorCategory.RATE_LIMIT
    if any(w in lowered for w in ("timeout", "timed out", "network", "fetch")):
        return ErrorCategory.NETWORK
    if "unavailable" in lowered:
        return ErrorCategory.SERVICE_UNAVAILABLE
    if "invalid data format" in lowered or "ai response" in lowered:
        return ErrorCategory.MALFORMED_AI_OUTPUT
    if "not found" in lowered:
        return ErrorCategory.NOT_FOUND

    return ErrorCategory.GENERIC
