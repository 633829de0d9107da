"""Target schema descriptors for structured responses.

A SchemaDescriptor pairs a structural description of the expected JSON
(rendered into the system instruction) with the decode function that
turns a candidate document into the typed result. Descriptors are
usually derived from a pydantic model with schema_for(), but can be
built by hand for any decode callable.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Callable, Generic, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class SchemaDescriptor(Generic[T]):
    """Expected JSON shape for one call site.

    Attributes:
        name: Short name of the result type (used in logs).
        json_schema: JSON Schema dict describing the expected document.
        decode: Callable taking the candidate JSON text and returning the
            typed value. Must raise ValueError (pydantic's ValidationError
            is one) when the document does not match.
    """

    name: str
    json_schema: dict[str, Any] = field(hash=False)
    decode: Callable[[str], T] = field(hash=False, compare=False)

    def render(self) -> str:
        """Render the schema as indented JSON text."""
        return json.dumps(self.json_schema, indent=2)


def schema_for(model_cls: type[M]) -> SchemaDescriptor[M]:
    """Derive a SchemaDescriptor from a pydantic model class.

    Decoding is strict: values must already have the JSON types the
    schema names, so ``"no"`` is not a boolean and ``"2"`` is not an
    integer.
    """
    return SchemaDescriptor(
        name=model_cls.__name__,
        json_schema=model_cls.model_json_schema(),
        decode=partial(model_cls.model_validate_json, strict=True),
    )


def format_validation_error(exc: ValueError) -> str:
    """Format a decode error as compact ``location: message`` lines.

    pydantic ValidationErrors are flattened one line per error; any other
    ValueError is returned as its string form.
    """
    if not isinstance(exc, ValidationError):
        return str(exc)
    lines: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"]) or "<root>"
        lines.append(f"{loc}: {err['msg']}")
    return "\n".join(lines)
