"""Syntactic JSON pre-validation.

Distinguishes "not JSON at all" (garbage, prose, truncated output) from
"valid JSON with the wrong shape" so the two failures can be reported
back to the model differently. No schema awareness here.
"""

from __future__ import annotations

import json
from typing import Any

from ellm.exceptions import MalformedJSONError


def check_json(text: str) -> Any:
    """Parse text as JSON and return the decoded value.

    Raises:
        MalformedJSONError: With the parser's diagnostic if text is not
            a single well-formed JSON document.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedJSONError(exc.msg, exc.lineno, exc.colno) from exc


def is_well_formed_json(text: str) -> bool:
    """Return True if text parses as a single JSON document."""
    try:
        check_json(text)
    except MalformedJSONError:
        return False
    return True
