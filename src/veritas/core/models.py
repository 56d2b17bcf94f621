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

"""Core data models for the VERITAS request pipeline.

This module defines the data structures shared by the orchestrator,
provider adapters and the chat front end:
- Conversation messages and request options
- Error taxonomy for provider failures
- Attempt and orchestration results
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Depth(str, Enum):
    """Knowledge layer a question is aimed at.

    Depth only changes how the system prompt frames the request. It never
    changes model selection, retries or validation.
    """

    SURFACE = "SURFACE"  # Public web
    DEEP = "DEEP"  # Academic, technical, paywalled
    DARK = "DARK"  # Suppressed, censored or deleted material
    VAULT = "VAULT"  # Archives, government records, leaks


class ErrorKind(str, Enum):
    """Classification of a failed provider attempt or orchestration call."""

    TIMEOUT = "TIMEOUT"
    RATE_LIMIT = "RATE_LIMIT"
    NETWORK = "NETWORK"
    VALIDATION = "VALIDATION"
    INVALID_REQUEST = "INVALID_REQUEST"
    AUTHENTICATION = "AUTHENTICATION"
    CIRCUIT_OPEN = "CIRCUIT_OPEN"
    CANCELLED = "CANCELLED"
    UNKNOWN = "UNKNOWN"

    @property
    def retryable(self) -> bool:
        """Default retry policy for this kind of failure."""
        return self in _RETRYABLE_KINDS


_RETRYABLE_KINDS = frozenset(
    {
        ErrorKind.TIMEOUT,
        ErrorKind.RATE_LIMIT,
        ErrorKind.NETWORK,
        ErrorKind.VALIDATION,
        ErrorKind.UNKNOWN,
    }
)


class ChatMessage(BaseModel):
    """A single turn of a conversation.

    Messages are immutable; a conversation is an ordered list of them,
    oldest first.
    """

    role: Role = Field(..., description="Author of the message")
    content: str = Field(..., description="Message text")

    model_config = ConfigDict(frozen=True)

    def to_dict(self) -> dict[str, str]:
        """Render in the chat-completions wire shape."""
        return {"role": self.role.value, "content": self.content}


class StructuredOutput(BaseModel):
    """Default schema for structured answers: markdown content plus sources."""

    content: str
    citations: list[str] | None = None


class RequestOptions(BaseModel):
    """Per-request options passed to the orchestrator.

    Attributes:
        structured_output_schema: Pydantic model the reply must validate against
        depth: Knowledge layer tag used for prompt framing only
        temperature: Sampling temperature (configured default when None)
        max_tokens: Completion budget (configured default when None)
    """

    structured_output_schema: type[BaseModel] | None = None
    depth: Depth | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, gt=0)

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class ProviderReply:
    """Normalized reply of a provider.

    Attributes:
        text: Raw text content of the reply
        data: Parsed JSON object when the text contained one
    """

    text: str
    data: dict[str, Any] | None = None

    def as_payload(self) -> dict[str, Any]:
        """Parsed JSON object if present, otherwise ``{"text": ...}``."""
        if self.data is not None:
            return self.data
        return {"text": self.text}


@dataclass(frozen=True)
class AttemptSuccess:
    """A provider attempt that produced an accepted result."""

    data: Any
    latency_ms: float = 0.0

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class AttemptFailure:
    """A provider attempt that failed.

    Attributes:
        kind: Error classification
        message: Human-readable description
        retryable: Whether another attempt may succeed
    """

    kind: ErrorKind
    message: str
    retryable: bool

    @property
    def success(self) -> bool:
        return False

    @classmethod
    def of(cls, kind: ErrorKind, message: str) -> AttemptFailure:
        """Build a failure using the default retry policy of ``kind``."""
        return cls(kind=kind, message=message, retryable=kind.retryable)


AttemptResult = AttemptSuccess | AttemptFailure


class OrchestrationError(BaseModel):
    """Error surfaced to the caller of the orchestrator."""

    type: ErrorKind
    message: str

    model_config = ConfigDict(frozen=True)


class OrchestrationMeta(BaseModel):
    """Observability data for one orchestration call.

    Attributes:
        correlation_id: Token tagging every log line of this call
        model_used: Model that succeeded, or the last model tried
        attempts: Attempts consumed on ``model_used`` (not a sum across models)
        total_latency_ms: Wall time of the whole call
        skipped_models: Models skipped because their circuit was open
    """

    correlation_id: str
    model_used: str | None = None
    attempts: int = 0
    total_latency_ms: float = 0.0
    skipped_models: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class OrchestrationResult(BaseModel):
    """Outcome of one orchestration call.

    Exactly one of ``data`` and ``error`` is set, depending on ``success``.
    """

    success: bool
    data: Any = None
    error: OrchestrationError | None = None
    meta: OrchestrationMeta

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def http_status(self) -> int:
        """Status code an HTTP layer should answer with."""
        if self.success:
            return 200
        if self.error is not None and self.error.type == ErrorKind.CIRCUIT_OPEN:
            return 503
        if self.error is not None and self.error.type == ErrorKind.TIMEOUT:
            return 504
        return 502

    def content_text(self) -> str | None:
        """Best-effort answer text of a successful result."""
        if not self.success or self.data is None:
            return None
        if isinstance(self.data, BaseModel):
            content = getattr(self.data, "content", None)
            return content if isinstance(content, str) else self.data.model_dump_json()
        if isinstance(self.data, dict):
            for key in ("content", "text"):
                value = self.data.get(key)
                if isinstance(value, str):
                    return value
        return str(self.data)
