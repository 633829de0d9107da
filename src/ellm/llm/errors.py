"""LLM-specific error hierarchy.

All LLM errors inherit from EllmError for consistent exception handling.
None of these are validation failures: the structured-response engine
lets them propagate immediately instead of spending a retry attempt.
"""

from __future__ import annotations

from ellm.exceptions import EllmError


class LLMClientError(EllmError):
    """Base for all LLM client errors."""


class LLMAuthError(LLMClientError):
    """Authentication failed (401)."""


class LLMRateLimitError(LLMClientError):
    """Rate limited by the API (429).

    Attributes:
        retry_after: Seconds to wait before retrying (from Retry-After header),
            or None if not provided.
    """

    def __init__(self, message: str = "Rate limit exceeded", retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        if retry_after is not None:
            message = f"{message} (retry after {retry_after}s)"
        super().__init__(message)


class LLMAPIError(LLMClientError):
    """The API returned a non-success status other than auth or rate limit."""

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"API returned error {status_code}: {message}")


class LLMResponseError(LLMClientError):
    """Unexpected response format from LLM API."""


class LLMTransportError(LLMClientError):
    """Network-level failure (connection refused, timeout, protocol error)."""
