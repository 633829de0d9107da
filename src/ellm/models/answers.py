"""Result model for yes/no questions."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BoolAnswer(BaseModel):
    """A boolean answer with the model's reasoning."""

    answer: bool = Field(description="true for yes, false for no")
    explanation: str = Field(description="One or two sentences justifying the answer")
