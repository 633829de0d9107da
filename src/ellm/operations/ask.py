"""Yes/no questions answered as a structured BoolAnswer."""

from __future__ import annotations

from ellm.llm.protocols import Transport
from ellm.messages import Messages
from ellm.models.answers import BoolAnswer
from ellm.schema import schema_for
from ellm.structured import DEFAULT_MAX_ATTEMPTS, retry_for_schema

BOOL_SYSTEM_PROMPT = (
    "You answer yes/no questions. Decide whether the answer to the user's "
    "question is yes (true) or no (false) and briefly explain why."
)

BOOL_SCHEMA = schema_for(BoolAnswer)


def ask_bool(
    transport: Transport,
    question: str,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> BoolAnswer:
    """Ask a yes/no question and return the decoded answer."""
    return retry_for_schema(
        transport,
        Messages.from_prompt(question),
        BOOL_SYSTEM_PROMPT,
        BOOL_SCHEMA,
        max_attempts=max_attempts,
    )
