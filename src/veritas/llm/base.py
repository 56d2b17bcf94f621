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

"""Base class and error hierarchy for provider adapters.

Every adapter implements ``_complete`` against its provider and raises the
typed ``LLMError`` hierarchy for provider-side failures. The public ``call``
method enforces the timeout and converts every failure into an
``AttemptFailure`` value, so callers never have to catch provider exceptions.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import time
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, ClassVar

from veritas.core.models import (
    AttemptFailure,
    AttemptResult,
    AttemptSuccess,
    ChatMessage,
    ErrorKind,
    ProviderReply,
    RequestOptions,
)
from veritas.llm.cancellation import CancellationToken, OperationCancelledError, run_with_timeout

logger = logging.getLogger(__name__)

_JSON_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class LLMError(Exception):
    """Base exception for provider errors."""

    kind: ClassVar[ErrorKind] = ErrorKind.UNKNOWN

    @property
    def retryable(self) -> bool:
        return self.kind.retryable

    def to_failure(self) -> AttemptFailure:
        """Convert into an attempt failure value."""
        return AttemptFailure(kind=self.kind, message=str(self), retryable=self.retryable)


class LLMTimeoutError(LLMError):
    """Raised when a provider request times out."""

    kind = ErrorKind.TIMEOUT


class LLMRateLimitError(LLMError):
    """Raised when hitting rate limits."""

    kind = ErrorKind.RATE_LIMIT


class LLMConnectionError(LLMError):
    """Raised on connection problems and provider-side 5xx errors."""

    kind = ErrorKind.NETWORK


class LLMAuthenticationError(LLMError):
    """Raised when authentication fails."""

    kind = ErrorKind.AUTHENTICATION


class LLMInvalidRequestError(LLMError):
    """Raised when the provider rejects the request as malformed."""

    kind = ErrorKind.INVALID_REQUEST


def error_for_status(status: int, message: str) -> LLMError:
    """Map an HTTP status code to the matching ``LLMError``."""
    if status in (401, 403):
        return LLMAuthenticationError(message)
    if status == 429:
        return LLMRateLimitError(message)
    if status in (408, 504):
        return LLMTimeoutError(message)
    if status >= 500:
        return LLMConnectionError(message)
    if 400 <= status < 500:
        return LLMInvalidRequestError(message)
    return LLMError(message)


def normalize_reply(content: str) -> ProviderReply:
    """Normalize raw reply text.

    If the text (optionally wrapped in a ```json fence) is a JSON object it is
    parsed into ``data``; any other text is kept as-is.
    """
    text = content.strip()
    candidate = text
    fenced = _JSON_FENCE.match(text)
    if fenced:
        candidate = fenced.group(1)

    try:
        parsed = json.loads(candidate) if candidate else None
    except json.JSONDecodeError:
        parsed = None

    return ProviderReply(text=content, data=parsed if isinstance(parsed, dict) else None)


class BaseLLMProvider(ABC):
    """Abstract base class for provider adapters.

    Attributes:
        family: Registry key of this adapter (e.g. "openai")
        default_temperature: Temperature used when a request sets none
        default_max_tokens: Completion budget used when a request sets none
    """

    family: str = "base"

    def __init__(self, default_temperature: float = 0.7, default_max_tokens: int = 800) -> None:
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens

    @abstractmethod
    async def _complete(
        self,
        model: str,
        messages: Sequence[ChatMessage],
        temperature: float,
        max_tokens: int,
        **kwargs: Any,
    ) -> str:
        """Send one chat completion request and return the reply text.

        Raises:
            LLMError: Subclass matching the provider failure
        """

    async def call(
        self,
        model: str,
        messages: Sequence[ChatMessage],
        options: RequestOptions | None = None,
        timeout_ms: int = 30_000,
        cancel_token: CancellationToken | None = None,
    ) -> AttemptResult:
        """Invoke ``model`` and normalize the outcome.

        Args:
            model: Model name within this provider family
            messages: Ordered conversation, passed through unchanged
            options: Request options (temperature / max tokens)
            timeout_ms: Deadline for the provider response
            cancel_token: Optional token that aborts the request

        Returns:
            AttemptSuccess carrying a ProviderReply, or AttemptFailure
        """
        options = options or RequestOptions()
        temperature = (
            options.temperature if options.temperature is not None else self.default_temperature
        )
        max_tokens = options.max_tokens if options.max_tokens is not None else self.default_max_tokens

        start = time.monotonic()
        try:
            text = await run_with_timeout(
                self._complete(model, messages, temperature, max_tokens),
                timeout_ms / 1000,
                cancel_token,
            )
        except OperationCancelledError:
            return AttemptFailure.of(ErrorKind.CANCELLED, f"{self.family}:{model} call cancelled")
        except asyncio.TimeoutError:
            return AttemptFailure.of(
                ErrorKind.TIMEOUT, f"{self.family}:{model} did not respond within {timeout_ms}ms"
            )
        except LLMError as e:
            return e.to_failure()
        except Exception as e:  # noqa: BLE001 - uncategorized SDK errors become UNKNOWN
            logger.warning(f"Unclassified error from {self.family}:{model}: {type(e).__name__}: {e}")
            return AttemptFailure.of(ErrorKind.UNKNOWN, f"{type(e).__name__}: {e}")

        latency_ms = (time.monotonic() - start) * 1000
        return AttemptSuccess(data=normalize_reply(text), latency_ms=latency_ms)
