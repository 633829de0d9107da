"""Schema-guided structured responses.

retry_for_schema() wraps a single Transport call so that the model's
reply is forced into JSON, checked for syntax, decoded into the target
type, and -- on failure -- corrected by feeding the error back into the
conversation. The loop is bounded by max_attempts and built on
ellm.retry.retry_with_steering().

Each attempt:
    1. System instruction = caller's instruction + a clause embedding the
       rendered schema.
    2. Send with the reply seeded by ``lead`` (``"{"``).
    3. candidate = lead + reply.
    4. Malformed JSON -> append the candidate and a syntax diagnostic.
    5. Decode; success returns. Mismatch -> append the candidate and a
       schema diagnostic.
    6. Out of attempts -> RetryExhaustedError.

Transport errors (auth, rate limit, network, API) are not validation
failures: they propagate immediately without spending an attempt.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from ellm.exceptions import MalformedJSONError
from ellm.json_check import check_json
from ellm.llm.protocols import Transport
from ellm.messages import Messages
from ellm.retry import RetryResult, ValidationResult, retry_with_steering
from ellm.schema import SchemaDescriptor, format_validation_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_LEAD = "{"
DEFAULT_MAX_ATTEMPTS = 3

MALFORMED = "malformed"
SCHEMA_MISMATCH = "schema"

_SCHEMA_CLAUSE = (
    "Respond only with a single JSON object that conforms to the following "
    "JSON schema. Do not include any prose, markdown or code fences.\n"
    "{schema}"
)
_MALFORMED_FEEDBACK = (
    "Your previous response was not valid JSON: {diagnosis}\n"
    "Respond again with only a single valid JSON object."
)
_SCHEMA_FEEDBACK = (
    "Your previous response was valid JSON but did not match the required "
    "schema:\n{diagnosis}\n"
    "Respond again with only a JSON object that conforms to the schema."
)


def compose_system(system: str | None, schema: SchemaDescriptor) -> str:
    """Build the effective system instruction for a schema-guided call."""
    clause = _SCHEMA_CLAUSE.format(schema=schema.render())
    if system:
        return f"{system}\n\n{clause}"
    return clause


def validate_candidate(candidate: str, schema: SchemaDescriptor[T]) -> ValidationResult[T]:
    """Pre-validate JSON syntax, then decode against the schema."""
    try:
        check_json(candidate)
    except MalformedJSONError as exc:
        return ValidationResult.fail(str(exc), kind=MALFORMED)
    try:
        value = schema.decode(candidate)
    except ValueError as exc:
        return ValidationResult.fail(format_validation_error(exc), kind=SCHEMA_MISMATCH)
    return ValidationResult.ok(value)


def feedback_for(result: ValidationResult) -> str:
    """Corrective user turn for a failed attempt.

    Malformed JSON and schema mismatches get different wording so the
    model can tell "not JSON" from "wrong shape".
    """
    if result.kind == MALFORMED:
        return _MALFORMED_FEEDBACK.format(diagnosis=result.diagnosis)
    return _SCHEMA_FEEDBACK.format(diagnosis=result.diagnosis)


def retry_for_schema_result(
    transport: Transport,
    messages: Messages,
    system: str | None,
    schema: SchemaDescriptor[T],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    lead: str = DEFAULT_LEAD,
) -> RetryResult[T]:
    """Run a schema-guided episode and return the full RetryResult.

    The caller's messages are copied; the episode's own history (failed
    candidates and corrections) is discarded when the call returns.

    Raises:
        RetryExhaustedError: If no attempt produced a valid document.
        LLMClientError: Any transport error, immediately.
    """
    episode = messages.copy()
    effective_system = compose_system(system, schema)

    def _attempt() -> str:
        reply = transport.send_message(episode, lead=lead, system=effective_system)
        return lead + reply

    def _validate(candidate: str) -> ValidationResult[T]:
        return validate_candidate(candidate, schema)

    def _steer(candidate: str, result: ValidationResult[T]) -> None:
        episode.append_assistant(candidate).append_user(feedback_for(result))

    result = retry_with_steering(
        attempt=_attempt,
        validate=_validate,
        steer=_steer,
        max_attempts=max_attempts,
    )
    logger.debug("Decoded %s after %d attempt(s)", schema.name, result.attempts)
    return result


def retry_for_schema(
    transport: Transport,
    messages: Messages,
    system: str | None,
    schema: SchemaDescriptor[T],
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    lead: str = DEFAULT_LEAD,
) -> T:
    """Send messages and decode the reply as ``schema``, retrying on bad output.

    Args:
        transport: Object implementing the Transport protocol.
        messages: Initial conversation (usually a single user turn).
        system: Optional caller system instruction.
        schema: Target schema descriptor (see ellm.schema.schema_for).
        max_attempts: Maximum transport calls for this episode.
        lead: Reply seed, re-prepended to the reply before validation.

    Returns:
        The decoded value.
    """
    return retry_for_schema_result(
        transport, messages, system, schema,
        max_attempts=max_attempts, lead=lead,
    ).value
