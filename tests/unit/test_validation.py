"""Unit tests for structured output validation."""

from __future__ import annotations

import pytest
from pydantic import BaseModel, Field

from veritas.core.models import AttemptFailure, AttemptSuccess, ErrorKind, ProviderReply, StructuredOutput
from veritas.llm.orchestration import StructuredOutputValidator


class Verdict(BaseModel):
    claim: str
    confidence: float = Field(ge=0.0, le=1.0)


@pytest.mark.unit
class TestStructuredOutputValidator:
    """Validation results are attempt values, never exceptions."""

    def test_valid_reply(self) -> None:
        validator = StructuredOutputValidator(Verdict)
        reply = ProviderReply(text="...", data={"claim": "true", "confidence": 0.9})

        result = validator.validate(reply, latency_ms=12.5)

        assert isinstance(result, AttemptSuccess)
        assert result.data == Verdict(claim="true", confidence=0.9)
        assert result.latency_ms == 12.5

    def test_non_json_reply(self) -> None:
        result = StructuredOutputValidator(Verdict).validate(ProviderReply(text="prose"))

        assert isinstance(result, AttemptFailure)
        assert result.kind == ErrorKind.VALIDATION
        assert result.retryable
        assert "Verdict" in result.message

    def test_schema_mismatch_lists_fields(self) -> None:
        reply = ProviderReply(text="...", data={"claim": "x", "confidence": 3})

        result = StructuredOutputValidator(Verdict).validate(reply)

        assert isinstance(result, AttemptFailure)
        assert result.kind == ErrorKind.VALIDATION
        assert "confidence" in result.message

    def test_default_schema_citations_optional(self) -> None:
        reply = ProviderReply(text="...", data={"content": "Answer"})

        result = StructuredOutputValidator(StructuredOutput).validate(reply)

        assert isinstance(result, AttemptSuccess)
        assert result.data.citations is None

    def test_falls_back_to_reply_text(self) -> None:
        reply = ProviderReply(text='{"claim": "true", "confidence": 0.5}', data=None)

        result = StructuredOutputValidator(Verdict).validate(reply)

        assert isinstance(result, AttemptSuccess)
        assert result.data.confidence == 0.5

    def test_invalid_json_text_is_validation_failure(self) -> None:
        result = StructuredOutputValidator(Verdict).validate(ProviderReply(text='{"claim": '))

        assert isinstance(result, AttemptFailure)
        assert result.kind == ErrorKind.VALIDATION
