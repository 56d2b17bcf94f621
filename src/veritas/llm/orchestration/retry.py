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

"""Retry with capped exponential backoff.

The controller runs an operation that reports failures as ``AttemptFailure``
values, sleeping between attempts and feeding every outcome to the model's
circuit breaker. The breaker is consulted by the orchestrator once per model,
not here; attempts inside one retry loop are not re-gated.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from veritas.core.models import AttemptFailure, AttemptResult, AttemptSuccess, ErrorKind
from veritas.llm.cancellation import CancellationToken

from .circuit_breaker import CircuitBreaker
from .config import RetryConfig

logger = logging.getLogger(__name__)

Operation = Callable[[], Awaitable[AttemptResult]]


@dataclass(frozen=True)
class RetryOutcome:
    """Final outcome of a retry loop.

    Attributes:
        result: The successful attempt, or the last failure observed
        attempts: Attempts actually made
        latency_ms: Elapsed time including backoff sleeps
    """

    result: AttemptResult
    attempts: int
    latency_ms: float

    @property
    def success(self) -> bool:
        return self.result.success


class RetryController:
    """Runs an operation up to ``max_attempts`` times.

    Example:
        >>> controller = RetryController(RetryConfig(max_attempts=3, base_delay_ms=1000))
        >>> outcome = await controller.execute(lambda: provider.call("gpt-4o", messages))
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        """Initialize retry controller.

        Args:
            config: Attempt budget and delays (uses defaults if None)
            sleep: Replacement for the backoff sleep, for tests
        """
        self.config = config or RetryConfig()
        self._sleep = sleep

    async def _wait(self, seconds: float, cancel_token: CancellationToken | None) -> bool:
        """Sleep between attempts. Returns True if cancelled meanwhile."""
        if self._sleep is not None:
            await self._sleep(seconds)
            return cancel_token is not None and cancel_token.cancelled
        if cancel_token is not None:
            return await cancel_token.sleep(seconds)
        await asyncio.sleep(seconds)
        return False

    async def execute(
        self,
        operation: Operation,
        breaker: CircuitBreaker | None = None,
        cancel_token: CancellationToken | None = None,
        label: str = "operation",
    ) -> RetryOutcome:
        """Run ``operation`` with retries.

        Args:
            operation: Zero-argument coroutine factory returning an AttemptResult
            breaker: Breaker notified of every attempt outcome
            cancel_token: Stops further attempts and sleeps when cancelled
            label: Name used in log messages

        Returns:
            RetryOutcome with the first success or the last failure
        """
        start = time.monotonic()
        last: AttemptFailure = AttemptFailure.of(ErrorKind.UNKNOWN, f"{label}: no attempt made")
        attempts = 0

        for attempt in range(1, self.config.max_attempts + 1):
            delay_ms = self.config.get_delay_ms(attempt)
            if delay_ms > 0:
                logger.warning(
                    f"{label}: attempt {attempt - 1} failed ({last.kind.value}), "
                    f"retrying in {delay_ms}ms"
                )
                if await self._wait(delay_ms / 1000, cancel_token):
                    last = AttemptFailure.of(ErrorKind.CANCELLED, f"{label}: cancelled during backoff")
                    break

            if cancel_token is not None and cancel_token.cancelled:
                last = AttemptFailure.of(ErrorKind.CANCELLED, f"{label}: cancelled")
                break

            attempts = attempt
            result = await operation()

            if isinstance(result, AttemptSuccess):
                if breaker is not None:
                    breaker.record_success()
                if attempt > 1:
                    logger.info(f"{label}: succeeded after {attempt} attempts")
                return RetryOutcome(
                    result=result,
                    attempts=attempt,
                    latency_ms=(time.monotonic() - start) * 1000,
                )

            # Caller cancellation says nothing about the model's health
            if breaker is not None and result.kind != ErrorKind.CANCELLED:
                breaker.record_failure()
            last = result

            if not result.retryable:
                logger.warning(f"{label}: {result.kind.value} is not retryable: {result.message}")
                break

        return RetryOutcome(
            result=last,
            attempts=attempts,
            latency_ms=(time.monotonic() - start) * 1000,
        )
