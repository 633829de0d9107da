"""Transport protocol for pluggable LLM clients."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ellm.messages import Messages


@runtime_checkable
class Transport(Protocol):
    """Protocol for one request/response exchange with a model.

    Any object with a matching send_message() works; the built-in
    AnthropicClient implements it. From the caller's point of view the
    call blocks until the full reply is available.
    """

    def send_message(
        self,
        messages: Messages,
        lead: str | None = None,
        system: str | None = None,
    ) -> str:
        """Send the conversation and return the reply text.

        Args:
            messages: Non-empty conversation. Must not be mutated.
            lead: Optional text the reply is forced to start with. The
                returned text continues from it and does NOT include it.
            system: Optional system instruction.
        """
        ...
