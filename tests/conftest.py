"""Shared test fixtures for ellm.

Provides a scripted Transport fake for driving the structured-response
engine without network access, plus helpers for canned API envelopes.
"""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from ellm.messages import Messages


@dataclass
class RecordedCall:
    """One send_message() call as seen by the transport."""

    messages: Messages
    lead: str | None
    system: str | None


class ScriptedTransport:
    """Transport fake that replays scripted replies in order.

    Each reply is returned as-is (it must NOT include the lead, exactly
    like a real reply). An exception instance in the script is raised
    instead of returned. The last entry repeats once the script runs out.
    """

    def __init__(self, replies: list[str | BaseException]) -> None:
        self.replies = replies
        self.calls: list[RecordedCall] = []

    def send_message(
        self,
        messages: Messages,
        lead: str | None = None,
        system: str | None = None,
    ) -> str:
        # Snapshot: the engine keeps appending to its episode afterwards.
        self.calls.append(RecordedCall(messages.copy(), lead, system))
        reply = self.replies[min(len(self.calls) - 1, len(self.replies) - 1)]
        if isinstance(reply, BaseException):
            raise reply
        return reply

    @property
    def call_count(self) -> int:
        return len(self.calls)


def success_envelope(
    text: str = "Hello!",
    model: str = "claude-sonnet-4-5-20250929",
    input_tokens: int = 10,
    output_tokens: int = 5,
) -> dict:
    """Build a realistic Messages API success response dict."""
    return {
        "id": "msg_test123",
        "type": "message",
        "role": "assistant",
        "content": [{"type": "text", "text": text}],
        "model": model,
        "stop_reason": "end_turn",
        "usage": {"input_tokens": input_tokens, "output_tokens": output_tokens},
    }


def error_envelope(message: str, error_type: str = "invalid_request_error") -> dict:
    """Build an Anthropic error response dict."""
    return {"type": "error", "error": {"type": error_type, "message": message}}


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point the config file at an empty temp dir and clear the env key.

    Returns the path where a config file would be read from.
    """
    from ellm.config import Config

    path = tmp_path / "config.toml"
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    monkeypatch.setattr(Config, "config_path", staticmethod(lambda: path))
    return path
