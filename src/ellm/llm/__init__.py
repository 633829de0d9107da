"""LLM client infrastructure for ellm.

Provides the Anthropic Messages API client, the pluggable Transport
protocol, and the LLM error hierarchy.
"""

from ellm.llm.client import AnthropicClient, MessageResponse
from ellm.llm.errors import (
    LLMAPIError,
    LLMAuthError,
    LLMClientError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTransportError,
)
from ellm.llm.protocols import Transport

__all__ = [
    "AnthropicClient",
    "MessageResponse",
    "Transport",
    "LLMClientError",
    "LLMAuthError",
    "LLMRateLimitError",
    "LLMAPIError",
    "LLMResponseError",
    "LLMTransportError",
]
