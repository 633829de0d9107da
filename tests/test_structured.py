"""Tests for the schema-guided retry engine (retry_for_schema).

Drives the engine with a ScriptedTransport and checks transport call
counts, the conversation passed to each attempt, the lead seam, and the
error taxonomy (validation failures retried, transport errors not).
"""

from __future__ import annotations

import json

import pytest
from hypothesis import given
from hypothesis import strategies as st

from ellm.exceptions import RetryExhaustedError
from ellm.llm.errors import LLMAPIError, LLMAuthError, LLMRateLimitError
from ellm.messages import Messages
from ellm.models import BookListing, BoolAnswer
from ellm.schema import SchemaDescriptor, schema_for
from ellm.structured import (
    MALFORMED,
    SCHEMA_MISMATCH,
    compose_system,
    feedback_for,
    retry_for_schema,
    retry_for_schema_result,
    validate_candidate,
)
from tests.conftest import ScriptedTransport

BOOL = schema_for(BoolAnswer)

# Replies never include the lead "{" -- the engine prepends it.
GOOD_TRUE = '"answer": true, "explanation": "Yes."}'
GOOD_FALSE = '"answer": false, "explanation": "No."}'
MALFORMED_REPLY = '"answer": true, "explanation": '  # truncated
WRONG_SHAPE = '"answer": "maybe"}'

MALFORMED_PREFIX = "Your previous response was not valid JSON"
SCHEMA_PREFIX = "Your previous response was valid JSON but did not match"


def _ask(transport, prompt="Is the sky blue?", system=None, **kwargs):
    return retry_for_schema(transport, Messages.from_prompt(prompt), system, BOOL, **kwargs)


class TestFirstAttemptSuccess:
    def test_single_transport_call(self):
        transport = ScriptedTransport([GOOD_TRUE])

        result = _ask(transport)

        assert result == BoolAnswer(answer=True, explanation="Yes.")
        assert transport.call_count == 1

    def test_lead_is_open_brace(self):
        transport = ScriptedTransport([GOOD_TRUE])
        _ask(transport)
        assert transport.calls[0].lead == "{"

    def test_first_call_sees_only_initial_messages(self):
        transport = ScriptedTransport([GOOD_TRUE])
        _ask(transport, prompt="Q?")
        assert transport.calls[0].messages.to_wire() == [{"role": "user", "content": "Q?"}]

    def test_result_carries_attempt_count(self):
        transport = ScriptedTransport([GOOD_TRUE])
        result = retry_for_schema_result(transport, Messages.from_prompt("Q"), None, BOOL)
        assert result.attempts == 1
        assert result.history is None


class TestSystemInstruction:
    def test_schema_embedded_verbatim(self):
        transport = ScriptedTransport([GOOD_TRUE])
        _ask(transport)
        assert BOOL.render() in transport.calls[0].system

    def test_caller_system_comes_first(self):
        transport = ScriptedTransport([GOOD_TRUE])
        _ask(transport, system="Be terse.")
        system = transport.calls[0].system
        assert system.startswith("Be terse.\n\n")
        assert BOOL.render() in system

    def test_compose_without_caller_system(self):
        composed = compose_system(None, BOOL)
        assert composed.startswith("Respond only with a single JSON object")
        assert composed.endswith(BOOL.render())

    def test_same_instruction_every_attempt(self):
        transport = ScriptedTransport([MALFORMED_REPLY, GOOD_TRUE])
        _ask(transport, system="S")
        assert transport.calls[0].system == transport.calls[1].system


class TestRecoveryAfterFailures:
    @pytest.mark.parametrize("k", [2, 3])
    def test_malformed_then_valid_takes_k_calls(self, k):
        transport = ScriptedTransport([MALFORMED_REPLY] * (k - 1) + [GOOD_TRUE])

        result = _ask(transport, max_attempts=3)

        assert result.answer is True
        assert transport.call_count == k

    def test_malformed_feedback_in_next_conversation(self):
        transport = ScriptedTransport([MALFORMED_REPLY, GOOD_TRUE])

        _ask(transport, prompt="Q?")

        second = transport.calls[1].messages
        assert len(second) == 3
        assert second[0].content == "Q?"
        assert second[1].role == "assistant"
        assert second[1].content == "{" + MALFORMED_REPLY
        assert second[2].role == "user"
        assert second[2].content.startswith(MALFORMED_PREFIX)

    def test_schema_mismatch_feedback_in_next_conversation(self):
        transport = ScriptedTransport([WRONG_SHAPE, GOOD_FALSE])

        result = _ask(transport)

        assert result.answer is False
        second = transport.calls[1].messages
        assert second[1].content == "{" + WRONG_SHAPE
        assert second[2].content.startswith(SCHEMA_PREFIX)
        assert "answer" in second[2].content
        assert "explanation" in second[2].content

    def test_feedback_wording_differs_by_failure_kind(self):
        transport = ScriptedTransport([MALFORMED_REPLY, WRONG_SHAPE, GOOD_TRUE])

        _ask(transport)

        third = transport.calls[2].messages
        assert [m.role for m in third] == ["user", "assistant", "user", "assistant", "user"]
        malformed_msg, schema_msg = third[2].content, third[4].content
        assert malformed_msg.startswith(MALFORMED_PREFIX)
        assert schema_msg.startswith(SCHEMA_PREFIX)

    def test_history_records_diagnoses(self):
        transport = ScriptedTransport([WRONG_SHAPE, GOOD_TRUE])
        result = retry_for_schema_result(transport, Messages.from_prompt("Q"), None, BOOL)
        assert result.attempts == 2
        assert len(result.history) == 1
        assert "answer" in result.history[0]

    def test_caller_messages_not_mutated(self):
        initial = Messages.from_prompt("Q?")
        transport = ScriptedTransport([MALFORMED_REPLY, WRONG_SHAPE, GOOD_TRUE])

        retry_for_schema(transport, initial, None, BOOL)

        assert initial.to_wire() == [{"role": "user", "content": "Q?"}]


class TestExhaustion:
    @pytest.mark.parametrize("max_attempts", [1, 2, 3, 5])
    def test_exactly_max_attempts_calls(self, max_attempts):
        transport = ScriptedTransport([MALFORMED_REPLY])

        with pytest.raises(RetryExhaustedError) as exc_info:
            _ask(transport, max_attempts=max_attempts)

        assert transport.call_count == max_attempts
        assert exc_info.value.attempts == max_attempts

    def test_default_is_three_attempts(self):
        transport = ScriptedTransport([WRONG_SHAPE])

        with pytest.raises(RetryExhaustedError):
            _ask(transport)

        assert transport.call_count == 3

    def test_last_result_is_last_candidate(self):
        transport = ScriptedTransport([MALFORMED_REPLY, WRONG_SHAPE])

        with pytest.raises(RetryExhaustedError) as exc_info:
            _ask(transport, max_attempts=2)

        assert exc_info.value.last_result == "{" + WRONG_SHAPE


class TestTransportErrorsAreTerminal:
    """Auth, rate-limit and API errors abort without consuming attempts."""

    @pytest.mark.parametrize(
        "error",
        [
            LLMAuthError("Authentication failed: invalid x-api-key"),
            LLMRateLimitError(),
            LLMAPIError(500, "overloaded"),
        ],
    )
    def test_error_on_first_attempt(self, error):
        transport = ScriptedTransport([error])

        with pytest.raises(type(error)):
            _ask(transport)

        assert transport.call_count == 1

    def test_error_after_validation_failure(self):
        transport = ScriptedTransport([MALFORMED_REPLY, LLMAuthError("revoked"), GOOD_TRUE])

        with pytest.raises(LLMAuthError):
            _ask(transport, max_attempts=3)

        assert transport.call_count == 2


class TestValidateCandidate:
    def test_malformed_kind(self):
        res = validate_candidate("{oops", BOOL)
        assert not res.passed
        assert res.kind == MALFORMED
        assert feedback_for(res).startswith(MALFORMED_PREFIX)

    def test_schema_kind(self):
        res = validate_candidate('{"answer": true}', BOOL)
        assert not res.passed
        assert res.kind == SCHEMA_MISMATCH
        assert "explanation" in res.diagnosis
        assert feedback_for(res).startswith(SCHEMA_PREFIX)

    def test_passes(self):
        res = validate_candidate('{"answer": true, "explanation": "x"}', BOOL)
        assert res.passed
        assert res.value == BoolAnswer(answer=True, explanation="x")


class TestStrictTypes:
    """Values of the wrong JSON type are schema mismatches, not coerced."""

    @pytest.mark.parametrize(
        "reply",
        ['"answer": "no", "explanation": "x"}', '"answer": 0, "explanation": "x"}'],
    )
    def test_coercible_bool_retried(self, reply):
        transport = ScriptedTransport([reply, GOOD_TRUE])

        result = _ask(transport)

        assert result.answer is True
        assert transport.call_count == 2
        assert transport.calls[1].messages[2].content.startswith(SCHEMA_PREFIX)

    def test_string_bool_is_schema_mismatch(self):
        res = validate_candidate('{"answer": "no", "explanation": "x"}', BOOL)
        assert not res.passed
        assert res.kind == SCHEMA_MISMATCH

    def test_string_score_retried(self):
        listing = schema_for(BookListing)
        wrong = '"books": [{"title": "Dune", "authors": [], "score": "2", "themes": []}]}'
        right = '"books": [{"title": "Dune", "authors": [], "score": 2, "themes": []}]}'
        transport = ScriptedTransport([wrong, right])

        result = retry_for_schema(transport, Messages.from_prompt("q"), None, listing)

        assert result.books[0].score == 2
        assert transport.call_count == 2
        feedback = transport.calls[1].messages[2].content
        assert feedback.startswith(SCHEMA_PREFIX)
        assert "books.0.score" in feedback


class TestLeadSeam:
    """The validated candidate is exactly lead + reply."""

    @staticmethod
    def _recording_schema(seen: list[str], accept: bool) -> SchemaDescriptor:
        def decode(text: str) -> str:
            seen.append(text)
            if not accept:
                raise ValueError("rejected")
            return text

        return SchemaDescriptor(name="Recorder", json_schema={}, decode=decode)

    @given(st.text(max_size=200))
    def test_candidate_is_lead_plus_reply(self, value):
        raw = '"a": ' + json.dumps(value) + "}"
        seen: list[str] = []
        transport = ScriptedTransport([raw])

        retry_for_schema(
            transport, Messages.from_prompt("q"), None,
            self._recording_schema(seen, accept=True), max_attempts=1,
        )

        assert seen == ["{" + raw]

    @given(st.text(max_size=200))
    def test_failed_candidate_fed_back_unchanged(self, reply):
        seen: list[str] = []
        transport = ScriptedTransport([reply])

        with pytest.raises(RetryExhaustedError):
            retry_for_schema(
                transport, Messages.from_prompt("q"), None,
                self._recording_schema(seen, accept=False), max_attempts=2,
            )

        assert transport.calls[1].messages[1].content == "{" + reply

    def test_custom_lead(self):
        transport = ScriptedTransport(['1, 2]'])
        schema = SchemaDescriptor(name="List", json_schema={"type": "array"}, decode=json.loads)

        result = retry_for_schema(transport, Messages.from_prompt("q"), None, schema, lead="[")

        assert result == [1, 2]
        assert transport.calls[0].lead == "["
