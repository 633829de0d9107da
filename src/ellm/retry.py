"""Bounded validate-and-steer retry protocol.

Provides retry_with_steering() -- a generic counted loop that produces a
raw result, validates it, and on failure steers the next attempt with the
diagnosis. The structured-response engine in ellm.structured is built on
it, but any operation whose output can be validated can use it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from ellm.exceptions import RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    """Outcome of validating one raw attempt.

    Attributes:
        passed: Whether validation passed.
        value: The decoded value when passed, otherwise None.
        diagnosis: Human-readable failure explanation, None when passed.
        kind: Short failure category (e.g. "malformed", "schema"), used
            for logging and for choosing feedback wording.
    """

    passed: bool
    value: T | None = None
    diagnosis: str | None = None
    kind: str | None = None

    @classmethod
    def ok(cls, value: T) -> ValidationResult[T]:
        return cls(passed=True, value=value)

    @classmethod
    def fail(cls, diagnosis: str, kind: str | None = None) -> ValidationResult[T]:
        return cls(passed=False, diagnosis=diagnosis, kind=kind)

    def __str__(self) -> str:
        if self.passed:
            return "passed"
        return self.diagnosis or "failed"


@dataclass(frozen=True)
class RetryResult(Generic[T]):
    """Result of a retry-guarded operation.

    Attributes:
        value: The successful result value.
        attempts: Total attempts (1 = first try succeeded).
        history: Brief log of failure diagnoses (None if first try succeeded).
    """

    value: T
    attempts: int
    history: list[str] | None = None


def retry_with_steering(
    *,
    attempt: Callable[[], R],
    validate: Callable[[R], ValidationResult[T]],
    steer: Callable[[R, ValidationResult[T]], Any],
    max_attempts: int = 3,
) -> RetryResult[T]:
    """Execute an operation with validation and steering.

    Flow:
        1. raw = attempt()
        2. result = validate(raw)
        3. If result.passed: return RetryResult with result.value
        4. If attempts >= max_attempts: raise RetryExhaustedError
        5. steer(raw, result) -- inject corrective feedback
        6. Goto 1

    Attempts are strictly sequential and there is no delay between them.
    Exceptions raised by attempt(), validate() or steer() propagate
    immediately and end the loop without consuming further attempts.

    Args:
        attempt: Callable that produces a raw result (e.g. one LLM call).
        validate: Callable taking the raw result, returns a ValidationResult.
        steer: Callable taking the raw result and its failed
            ValidationResult; injects feedback for the next attempt.
        max_attempts: Maximum total attempts (default 3).

    Returns:
        RetryResult with the validated value, attempt count, and history.

    Raises:
        RetryExhaustedError: If all attempts fail validation.
        ValueError: If max_attempts is less than 1.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

    history: list[str] = []
    last_raw: R | None = None

    for attempt_num in range(1, max_attempts + 1):
        last_raw = attempt()
        result = validate(last_raw)

        if result.passed:
            logger.debug("Attempt %d/%d passed validation", attempt_num, max_attempts)
            return RetryResult(
                value=result.value,  # type: ignore[arg-type]
                attempts=attempt_num,
                history=history if history else None,
            )

        diagnosis = result.diagnosis or "validation failed"
        history.append(diagnosis)
        logger.warning(
            "Attempt %d/%d failed validation (%s): %s",
            attempt_num, max_attempts, result.kind or "invalid", diagnosis,
        )

        if attempt_num < max_attempts:
            steer(last_raw, result)

    raise RetryExhaustedError(
        attempts=max_attempts,
        last_diagnosis=history[-1],
        last_result=last_raw,
    )
