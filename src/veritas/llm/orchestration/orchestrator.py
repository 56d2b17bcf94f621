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

"""Request orchestrator: the resilient multi-model request pipeline.

Tries the configured models strictly in priority order. For each model:

1. Resolve the family adapter (unknown families are skipped)
2. Ask the model's circuit breaker whether a request may be sent
3. Run the retry controller around the adapter call
4. Validate the reply when the request declares a schema

The first accepted reply wins; no further models are tried. Models are never
called in parallel, so one chat request costs at most one in-flight provider
call.

Example:
    >>> orchestrator = RequestOrchestrator(registry, OrchestratorConfig(models=("openai:gpt-4o",)))
    >>> result = await orchestrator.orchestrate(messages, RequestOptions(depth=Depth.DEEP))
    >>> if result.success:
    ...     print(result.data)
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Sequence

from veritas.core.conversation import apply_history_window
from veritas.core.models import (
    AttemptFailure,
    AttemptResult,
    AttemptSuccess,
    ChatMessage,
    ErrorKind,
    OrchestrationError,
    OrchestrationMeta,
    OrchestrationResult,
    ProviderReply,
    RequestOptions,
)
from veritas.llm.base import BaseLLMProvider
from veritas.llm.cancellation import CancellationToken
from veritas.llm.registry import ProviderRegistry

from .circuit_breaker import CircuitBreakerRegistry
from .config import OrchestratorConfig
from .retry import RetryController
from .validation import StructuredOutputValidator

logger = logging.getLogger(__name__)

ALL_PROVIDERS_FAILED = "All providers failed"


class RequestOrchestrator:
    """Produces one best-effort answer from a prioritized list of models.

    Attributes:
        registry: Family → adapter map used to resolve model identifiers
        config: Immutable orchestration configuration
        breakers: Per-model circuit breakers (share to learn failures globally)
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        config: OrchestratorConfig | None = None,
        breakers: CircuitBreakerRegistry | None = None,
        retry_controller: RetryController | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            registry: Registered provider adapters
            config: Orchestrator configuration (uses defaults if None)
            breakers: Shared breaker registry (a private one is created if None)
            retry_controller: Retry controller (built from ``config.retry`` if None)
        """
        self.registry = registry
        self.config = config or OrchestratorConfig()
        self.breakers = breakers or CircuitBreakerRegistry(self.config.circuit_breaker)
        self.retry_controller = retry_controller or RetryController(self.config.retry)

    async def orchestrate(
        self,
        messages: Sequence[ChatMessage],
        options: RequestOptions | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> OrchestrationResult:
        """Answer a conversation.

        Never raises for provider failures; every failure is reported in the
        returned result.

        Args:
            messages: Conversation, oldest first
            options: Schema / depth / sampling options
            cancel_token: Aborts in-flight calls and further retries

        Returns:
            OrchestrationResult with data on success or a classified error
        """
        options = options or RequestOptions()
        correlation_id = uuid.uuid4().hex
        start = time.monotonic()
        history = apply_history_window(messages, self.config.history_window)
        validator = (
            StructuredOutputValidator(options.structured_output_schema)
            if options.structured_output_schema is not None
            else None
        )

        model_used: str | None = None
        attempts = 0
        skipped: list[str] = []
        final_error: OrchestrationError | None = None

        def finish(success: bool, data: object = None) -> OrchestrationResult:
            meta = OrchestrationMeta(
                correlation_id=correlation_id,
                model_used=model_used,
                attempts=attempts,
                total_latency_ms=(time.monotonic() - start) * 1000,
                skipped_models=skipped,
            )
            if success:
                return OrchestrationResult(success=True, data=data, meta=meta)
            error = final_error or OrchestrationError(
                type=ErrorKind.UNKNOWN, message=ALL_PROVIDERS_FAILED
            )
            logger.error(
                f"[{correlation_id}] Orchestration failed: {error.type.value}: {error.message}"
            )
            return OrchestrationResult(success=False, error=error, meta=meta)

        logger.info(
            f"[{correlation_id}] Orchestrating {len(history)} message(s) across "
            f"{len(self.config.models)} model(s)"
            + (f" at depth {options.depth.value}" if options.depth else "")
        )

        if not history:
            final_error = OrchestrationError(
                type=ErrorKind.INVALID_REQUEST, message="No messages to send"
            )
            return finish(False)

        for identifier in self.config.models:
            resolved = self.registry.resolve(identifier)
            if resolved is None:
                logger.warning(f"[{correlation_id}] No provider registered for '{identifier}', skipping")
                continue
            provider, model_name = resolved

            breaker = self.breakers.get(identifier)
            if not breaker.can_request():
                logger.warning(f"[{correlation_id}] Circuit open for '{identifier}', skipping")
                skipped.append(identifier)
                final_error = OrchestrationError(
                    type=ErrorKind.CIRCUIT_OPEN,
                    message=f"Circuit open for '{identifier}'; no remaining candidates",
                )
                continue

            model_used = identifier

            async def attempt(
                provider: BaseLLMProvider = provider, model_name: str = model_name
            ) -> AttemptResult:
                return await self._attempt(
                    provider, model_name, history, options, validator, cancel_token
                )

            outcome = await self.retry_controller.execute(
                attempt,
                breaker=breaker,
                cancel_token=cancel_token,
                label=f"[{correlation_id}] {identifier}",
            )
            attempts = outcome.attempts

            if isinstance(outcome.result, AttemptSuccess):
                logger.info(
                    f"[{correlation_id}] Answered by '{identifier}' after "
                    f"{outcome.attempts} attempt(s) in {outcome.latency_ms:.0f}ms"
                )
                return finish(True, outcome.result.data)

            failure = outcome.result
            final_error = OrchestrationError(type=failure.kind, message=failure.message)
            if failure.kind == ErrorKind.CANCELLED:
                return finish(False)

            logger.warning(
                f"[{correlation_id}] '{identifier}' exhausted after {outcome.attempts} "
                f"attempt(s): {failure.kind.value}"
            )

        return finish(False)

    async def _attempt(
        self,
        provider: BaseLLMProvider,
        model_name: str,
        messages: Sequence[ChatMessage],
        options: RequestOptions,
        validator: StructuredOutputValidator | None,
        cancel_token: CancellationToken | None,
    ) -> AttemptResult:
        """One provider call followed by optional schema validation."""
        result = await provider.call(
            model_name,
            messages,
            options=options,
            timeout_ms=self.config.timeout_ms,
            cancel_token=cancel_token,
        )
        if isinstance(result, AttemptFailure):
            return result

        reply = result.data
        if not isinstance(reply, ProviderReply):
            return AttemptSuccess(data=reply, latency_ms=result.latency_ms)
        if validator is None:
            return AttemptSuccess(data=reply.as_payload(), latency_ms=result.latency_ms)
        return validator.validate(reply, latency_ms=result.latency_ms)
