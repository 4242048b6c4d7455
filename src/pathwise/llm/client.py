"""LLM client for the generative-language endpoint.

Talks to Gemini through its OpenAI-compatible API using the ``openai`` SDK.
Each call sends a single user prompt, is bounded by a hard timeout and is
never retried automatically: HTTP failures are classified by status code
into user-facing errors and the caller decides whether to offer a retry.
"""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any

import openai
import structlog
from openai import OpenAI

from pathwise.config.app_config import LLMSettings, load_app_config
from pathwise.core.errors import ErrorCategory, PathwiseError
from pathwise.utils.text_utils import clean_json_response

logger = structlog.get_logger(__name__)

# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_TIMEOUT = 15.0

MISSING_KEY_MESSAGE = (
    "Gemini API key is not configured. Please check your environment variables."
)
RATE_LIMIT_MESSAGE = "API rate limit exceeded. Please try again in a few minutes."
INVALID_KEY_MESSAGE = "Invalid API key. Please check your Gemini API configuration."
UNAVAILABLE_MESSAGE = "AI service is temporarily unavailable. Please try again later."
TIMEOUT_MESSAGE = (
    "Request timeout - the AI service is taking too long to respond. "
    "Please try again."
)
NETWORK_MESSAGE = (
    "Network connection error. Please check your internet connection and try again."
)
INVALID_RESPONSE_MESSAGE = "Invalid response from AI service. Please try again."
INVALID_FORMAT_MESSAGE = "AI returned invalid data format. Please try again."
PARSE_FAILED_MESSAGE = "Failed to process AI response. Please try again."


# =============================================================================
# ERRORS
# =============================================================================


class LLMError(PathwiseError):
    """Error during LLM interaction."""

    category = ErrorCategory.GENERIC
    title = "Generation Failed"


class LLMConfigError(LLMError):
    """Client is not configured (missing API key)."""

    title = "Configuration Error"


class LLMAuthError(LLMError):
    """Endpoint rejected the API key (401)."""

    category = ErrorCategory.INVALID_CREDENTIALS


class LLMRateLimitError(LLMError):
    """Endpoint rate limit hit (429)."""

    category = ErrorCategory.RATE_LIMIT
    retryable = True


class LLMUnavailableError(LLMError):
    """Endpoint returned a 5xx status."""

    category = ErrorCategory.SERVICE_UNAVAILABLE
    retryable = True


class LLMConnectionError(LLMError):
    """Could not reach the endpoint."""

    category = ErrorCategory.NETWORK
    retryable = True


class LLMTimeoutError(LLMConnectionError):
    """Endpoint did not answer within the per-call timeout."""


class LLMResponseError(LLMError):
    """Reply could not be turned into the expected structure."""

    category = ErrorCategory.MALFORMED_AI_OUTPUT
    retryable = True


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class LLMResponse:
    """Response from LLM."""

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    latency_ms: int = 0

    @property
    def total_tokens(self) -> int:
        """Get total token count."""
        return self.usage.get("total_tokens", 0)


def parse_json_payload(content: str) -> Any:
    """Parse the JSON object or array embedded in a completion.

    Args:
        content: Raw completion text

    Returns:
        Parsed list or dict

    Raises:
        LLMResponseError: If no JSON structure can be recovered
    """
    cleaned = clean_json_response(content)

    if not cleaned or not (cleaned.startswith("[") or cleaned.startswith("{")):
        raise LLMResponseError(INVALID_FORMAT_MESSAGE)

    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error("json_parse_failed", error=str(e), content=cleaned[:200])
        raise LLMResponseError(PARSE_FAILED_MESSAGE) from e


# =============================================================================
# LLM CLIENT
# =============================================================================


class LLMClient:
    """Client for single-prompt text generation."""

    def __init__(self, settings: LLMSettings | None = None, api_key: str | None = None):
        """Initialize LLM client.

        Args:
            settings: Endpoint settings (loaded from app config if not provided)
            api_key: Explicit key; defaults to the configured environment variable
        """
        if settings is None:
            settings = load_app_config().llm

        self.settings = settings
        self.api_key = api_key if api_key is not None else settings.get_api_key()
        self._client: OpenAI | None = None

        logger.info(
            "llm_client_initialized",
            provider=settings.provider,
            model=settings.model,
            base_url=settings.base_url,
            has_key=bool(self.api_key),
        )

    def _get_client(self) -> OpenAI:
        if not self.api_key:
            raise LLMConfigError(MISSING_KEY_MESSAGE)
        if self._client is None:
            self._client = OpenAI(
                base_url=self.settings.base_url,
                api_key=self.api_key,
                max_retries=0,
            )
        return self._client

    def generate(self, prompt: str, timeout: float = DEFAULT_TIMEOUT) -> LLMResponse:
        """Send a prompt and return the text completion.

        Args:
            prompt: User prompt text
            timeout: Hard limit for the whole request, in seconds

        Returns:
            LLMResponse with content and metadata

        Raises:
            LLMConfigError: If no API key is configured
            LLMRateLimitError: On HTTP 429
            LLMAuthError: On HTTP 401
            LLMUnavailableError: On HTTP 5xx
            LLMTimeoutError: If the timeout elapses
            LLMConnectionError: If the endpoint cannot be reached
            LLMResponseError: If the reply has no content
        """
        client = self._get_client()
        start_time = time.time()

        try:
            response = client.with_options(timeout=timeout).chat.completions.create(
                model=self.settings.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=self.settings.temperature,
                max_tokens=self.settings.max_tokens,
            )
        except openai.APITimeoutError as e:
            raise LLMTimeoutError(TIMEOUT_MESSAGE) from e
        except openai.APIConnectionError as e:
            raise LLMConnectionError(NETWORK_MESSAGE) from e
        except openai.APIStatusError as e:
            raise _error_for_status(e.status_code, _status_body(e)) from e

        latency_ms = int((time.time() - start_time) * 1000)

        if not response.choices or response.choices[0].message is None:
            raise LLMResponseError(INVALID_RESPONSE_MESSAGE)

        content = response.choices[0].message.content
        if not content:
            raise LLMResponseError(INVALID_RESPONSE_MESSAGE)

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        logger.debug(
            "llm_response",
            model=response.model,
            tokens=usage.get("total_tokens", 0),
            latency_ms=latency_ms,
        )

        return LLMResponse(
            content=content,
            model=response.model or self.settings.model,
            usage=usage,
            latency_ms=latency_ms,
        )

    def generate_json(self, prompt: str, timeout: float = DEFAULT_TIMEOUT) -> Any:
        """Send a prompt and parse the JSON structure out of the reply.

        Returns:
            Parsed list or dict

        Raises:
            LLMResponseError: If the reply holds no parseable JSON
        """
        response = self.generate(prompt, timeout=timeout)
        return parse_json_payload(response.content)

    def is_available(self) -> bool:
        """Check if the endpoint answers with the configured key.

        Returns:
            True if the model listing succeeds, False otherwise
        """
        try:
            self._get_client().with_options(timeout=DEFAULT_TIMEOUT).models.list()
            return True
        except (LLMError, openai.OpenAIError) as e:
            logger.warning("llm_unavailable", error=str(e))
            return False


def _status_body(error: openai.APIStatusError) -> str:
    body = error.body
    if body is None:
        return error.message
    if isinstance(body, str):
        return body
    return json.dumps(body)


def _error_for_status(status_code: int, body: str) -> LLMError:
    """Map a non-2xx status code to a user-facing error."""
    if status_code == 429:
        return LLMRateLimitError(RATE_LIMIT_MESSAGE)
    if status_code == 401:
        return LLMAuthError(INVALID_KEY_MESSAGE)
    if status_code >= 500:
        return LLMUnavailableError(UNAVAILABLE_MESSAGE)
    return LLMError(f"AI request failed: {status_code} - {body}")
