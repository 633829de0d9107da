"""Ordered conversation log threaded through a request.

Messages is append-only: corrections are made by appending new turns,
never by editing history, so every attempt stays visible in the log.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Literal

from pydantic import BaseModel, ConfigDict


class Message(BaseModel):
    """A single conversation turn."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str


class Messages:
    """Append-only sequence of Message turns.

    Mutators return the same instance so calls can be chained::

        msgs = Messages().append_user("Hi").append_assistant("Hello")

    Use copy() when a caller needs an independent history.
    """

    def __init__(self, messages: Iterable[Message] | None = None) -> None:
        self._messages: list[Message] = list(messages) if messages else []

    @classmethod
    def from_prompt(cls, text: str) -> Messages:
        """Create a sequence holding a single user turn."""
        return cls().append_user(text)

    def append_user(self, text: str) -> Messages:
        self._messages.append(Message(role="user", content=text))
        return self

    def append_assistant(self, text: str) -> Messages:
        self._messages.append(Message(role="assistant", content=text))
        return self

    def copy(self) -> Messages:
        """Return an independent copy of this sequence."""
        return Messages(self._messages)

    def to_wire(self) -> list[dict[str, str]]:
        """Return the ordered ``[{role, content}]`` list for a request body."""
        return [m.model_dump() for m in self._messages]

    @property
    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self._messages)

    def __getitem__(self, index: int) -> Message:
        return self._messages[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Messages):
            return NotImplemented
        return self._messages == other._messages

    def __repr__(self) -> str:
        return f"Messages({len(self._messages)} turns)"
