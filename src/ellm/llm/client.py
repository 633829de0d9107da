"""Built-in Anthropic Messages API httpx client with tenacity retry.

Provides a sync HTTP client implementing the Transport protocol.
Transient failures (connection errors, 5xx, overloaded) are retried with
exponential backoff; authentication and rate-limit errors are not.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
import tenacity
from pydantic import BaseModel, ValidationError

from ellm.config import Config
from ellm.llm.errors import (
    LLMAPIError,
    LLMAuthError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTransportError,
)
from ellm.messages import Messages

logger = logging.getLogger(__name__)

ANTHROPIC_VERSION = "2023-06-01"

_RETRYABLE_STATUS_CODES = {500, 502, 503, 504, 529}


class ContentBlock(BaseModel):
    """Content block in the response."""

    type: str
    text: str = ""


class Usage(BaseModel):
    """Usage statistics from the API."""

    input_tokens: int
    output_tokens: int


class MessageResponse(BaseModel):
    """Success envelope from the Messages API."""

    id: str
    type: str
    role: str
    content: list[ContentBlock]
    model: str
    stop_reason: str | None = None
    usage: Usage


def _is_retryable(exc: BaseException) -> bool:
    """Check if an exception is retryable.

    Retryable: connection-level failures, 500, 502, 503, 504, 529.
    Not retryable: 401, 429, 400, 403, other client errors.
    """
    if isinstance(exc, LLMTransportError):
        return True
    if isinstance(exc, LLMAPIError):
        return exc.status_code in _RETRYABLE_STATUS_CODES
    return False


def _error_message(response: httpx.Response) -> str:
    """Pull the human-readable message out of an error envelope.

    Accepts both ``{"type": ..., "message": ...}`` and Anthropic's nested
    ``{"type": "error", "error": {"type": ..., "message": ...}}``. Falls
    back to the raw body.
    """
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and "message" in error:
            return str(error["message"])
        if "message" in data:
            return str(data["message"])
    return response.text


class AnthropicClient:
    """Sync httpx client for the Anthropic Messages API.

    Implements the Transport protocol. Supports retry with exponential
    backoff for transient errors. Fails immediately on authentication
    (401) and rate-limit (429) errors.

    Usage::

        with AnthropicClient(Config.load()) as client:
            text = client.send_message(Messages.from_prompt("Hello"))
    """

    def __init__(
        self,
        config: Config,
        *,
        timeout: float = 120.0,
        max_retries: int = 3,
        temperature: float | None = 0.0,
        retry_wait: tenacity.wait.wait_base | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Client configuration. Validated here, before any
                network activity.
            timeout: Request timeout in seconds.
            max_retries: Maximum attempts for transient errors (1 disables retry).
            temperature: Sampling temperature sent with every request, or
                None to use the API default.
            retry_wait: tenacity wait strategy between transient retries.
                Defaults to exponential backoff with jitter.
            transport: Optional httpx transport (used by tests).

        Raises:
            InvalidApiKeyError: If the API key is empty.
        """
        config.validate_key()
        self._config = config
        self._base_url = config.base_url.rstrip("/")
        self._max_retries = max(1, max_retries)
        self._temperature = temperature
        self._retry_wait = retry_wait or (
            tenacity.wait_exponential(multiplier=1, min=1, max=30)
            + tenacity.wait_random(0, 2)
        )
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={
                "x-api-key": config.api_key,
                "anthropic-version": ANTHROPIC_VERSION,
                "content-type": "application/json",
            },
        )

    @classmethod
    def from_options(
        cls,
        api_key: str | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
        **kwargs: Any,
    ) -> AnthropicClient:
        """Build a client from command-line style overrides.

        Loads configuration (explicit key > environment > config file),
        then applies the model and max_tokens overrides.
        """
        config = Config.load(api_key)
        if model is not None:
            config = config.with_model(model)
        if max_tokens is not None:
            config = config.with_max_tokens(max_tokens)
        return cls(config, **kwargs)

    @property
    def config(self) -> Config:
        return self._config

    def send_message(
        self,
        messages: Messages,
        lead: str | None = None,
        system: str | None = None,
    ) -> str:
        """Send the conversation and return the reply text.

        If lead is given it is sent as a trailing assistant turn so the
        model continues from it; the returned text does not include it.
        The caller's messages are not modified.

        Raises:
            LLMAuthError: On 401 (no retry).
            LLMRateLimitError: On 429 (no retry).
            LLMAPIError: On other non-success statuses, after retries for 5xx.
            LLMTransportError: On network failures after all retries.
            LLMResponseError: On an unexpected response envelope.
        """
        if len(messages) == 0:
            raise ValueError("messages must not be empty")

        outgoing = messages.copy()
        if lead is not None:
            outgoing.append_assistant(lead)

        payload: dict[str, Any] = {
            "model": self._config.model,
            "max_tokens": self._config.max_tokens,
            "messages": outgoing.to_wire(),
        }
        if system is not None:
            payload["system"] = system
        if self._temperature is not None:
            payload["temperature"] = self._temperature

        retryer = tenacity.Retrying(
            retry=tenacity.retry_if_exception(_is_retryable),
            wait=self._retry_wait,
            stop=tenacity.stop_after_attempt(self._max_retries),
            before_sleep=tenacity.before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        response = retryer(self._do_send, payload)

        logger.debug(
            "model=%s stop_reason=%s input_tokens=%d output_tokens=%d",
            response.model,
            response.stop_reason,
            response.usage.input_tokens,
            response.usage.output_tokens,
        )
        return self.extract_text(response)

    def _do_send(self, payload: dict[str, Any]) -> MessageResponse:
        """Execute a single Messages API request (no retry)."""
        try:
            response = self._client.post(f"{self._base_url}/messages", json=payload)
        except httpx.TransportError as exc:
            raise LLMTransportError(f"Network error: {exc}") from exc

        if response.status_code == 401:
            raise LLMAuthError(f"Authentication failed: {_error_message(response)}")

        if response.status_code == 429:
            retry_after_raw = response.headers.get("Retry-After")
            retry_after: float | None = None
            if retry_after_raw is not None:
                try:
                    retry_after = float(retry_after_raw)
                except (ValueError, TypeError):
                    pass
            raise LLMRateLimitError(retry_after=retry_after)

        if not response.is_success:
            raise LLMAPIError(response.status_code, _error_message(response))

        try:
            return MessageResponse.model_validate_json(response.content)
        except ValidationError as exc:
            raise LLMResponseError(f"Unexpected response format: {exc}") from exc

    @staticmethod
    def extract_text(response: MessageResponse) -> str:
        """Return the text of the first content block.

        Raises:
            LLMResponseError: If the response has no content blocks.
        """
        if not response.content:
            raise LLMResponseError("Unexpected response format: No content in response")
        return response.content[0].text

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> AnthropicClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
