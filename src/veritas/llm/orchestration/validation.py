# Copyright 2025 VERITAS Contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Structured output validation.

When a request declares a pydantic schema, every successful provider reply
is validated before it is accepted. A reply that does not match counts as a
failed, retryable attempt, so a re-phrased retry or the next model can still
produce usable output.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from veritas.core.models import AttemptFailure, AttemptResult, AttemptSuccess, ErrorKind, ProviderReply

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class StructuredOutputValidator(Generic[SchemaT]):
    """Validates provider replies against a pydantic model.

    Example:
        >>> validator = StructuredOutputValidator(StructuredOutput)
        >>> result = validator.validate(ProviderReply(text='{"content": "..."}', data={...}))
    """

    def __init__(self, schema: type[SchemaT]) -> None:
        self.schema = schema

    def validate(self, reply: ProviderReply, latency_ms: float = 0.0) -> AttemptResult:
        """Validate ``reply``.

        Uses the parsed ``reply.data`` when present, otherwise parses the JSON
        in ``reply.text``.

        Returns:
            AttemptSuccess carrying the schema instance, or a VALIDATION failure
        """
        try:
            if reply.data is not None:
                parsed = self.schema.model_validate(reply.data)
            else:
                parsed = self.schema.model_validate_json(reply.text)
        except ValidationError as e:
            return AttemptFailure.of(
                ErrorKind.VALIDATION,
                f"Reply does not match {self.schema.__name__}: {e.error_count()} error(s): "
                f"{_summarize(e)}",
            )

        return AttemptSuccess(data=parsed, latency_ms=latency_ms)


def _summarize(error: ValidationError) -> str:
    parts = []
    for detail in error.errors()[:3]:
        location = ".".join(str(p) for p in detail["loc"]) or "<root>"
        parts.append(f"{location}: {detail['msg']}")
    return "; ".join(parts)
