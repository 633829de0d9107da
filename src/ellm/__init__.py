"""ellm: command-line and library client for the Anthropic Messages API.

Sends prompts to a hosted model and, optionally, coerces the reply into
a schema-validated value with a bounded, self-correcting retry loop.

Example::

    from ellm import AnthropicClient, Config, Messages, retry_for_schema, schema_for
    from ellm.models import BoolAnswer

    with AnthropicClient(Config.load()) as client:
        answer = retry_for_schema(
            client,
            Messages.from_prompt("Is the sky blue?"),
            None,
            schema_for(BoolAnswer),
        )
"""

from ellm.config import Config
from ellm.exceptions import (
    ApiKeyNotFoundError,
    ConfigError,
    ConfigFileError,
    EllmError,
    InvalidApiKeyError,
    MalformedJSONError,
    RetryExhaustedError,
)
from ellm.json_check import check_json, is_well_formed_json
from ellm.llm import (
    AnthropicClient,
    LLMAPIError,
    LLMAuthError,
    LLMClientError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTransportError,
    Transport,
)
from ellm.messages import Message, Messages
from ellm.retry import RetryResult, ValidationResult, retry_with_steering
from ellm.schema import SchemaDescriptor, schema_for
from ellm.structured import retry_for_schema, retry_for_schema_result

__version__ = "0.1.0"

__all__ = [
    # Client
    "AnthropicClient",
    "Config",
    "Transport",
    # Conversation
    "Message",
    "Messages",
    # Structured responses
    "SchemaDescriptor",
    "schema_for",
    "retry_for_schema",
    "retry_for_schema_result",
    "retry_with_steering",
    "RetryResult",
    "ValidationResult",
    "check_json",
    "is_well_formed_json",
    # Errors
    "EllmError",
    "ConfigError",
    "ApiKeyNotFoundError",
    "InvalidApiKeyError",
    "ConfigFileError",
    "MalformedJSONError",
    "RetryExhaustedError",
    "LLMClientError",
    "LLMAuthError",
    "LLMRateLimitError",
    "LLMAPIError",
    "LLMResponseError",
    "LLMTransportError",
]
