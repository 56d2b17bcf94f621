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

"""Circuit Breaker pattern implementation for model providers.

Stops calling a model that keeps failing and lets a probe through once it
has had time to recover. The circuit breaker has three states:

- CLOSED: Normal operation, requests are allowed
- OPEN: Model is failing, requests are blocked
- HALF_OPEN: Testing if the model has recovered

State transitions:
    CLOSED → OPEN: After `failure_threshold` consecutive failures
    OPEN → HALF_OPEN: Once more than `reset_timeout_ms` passed since the last
        failure, checked lazily by `can_request()`
    HALF_OPEN → CLOSED: On the next success
    HALF_OPEN → OPEN: On a failure; the failure count is only reset by a
        success, so it is still at or above the threshold

References:
    - https://martinfowler.com/bliki/CircuitBreaker.html
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .config import CircuitBreakerConfig

logger = logging.getLogger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Blocking requests
    HALF_OPEN = "half_open"  # Testing recovery


@dataclass
class CircuitBreakerMetrics:
    """Counters for circuit breaker monitoring."""

    successful_calls: int = 0
    failed_calls: int = 0
    rejected_calls: int = 0
    state_changes: int = 0


class CircuitBreaker:
    """Per-model circuit breaker.

    All state changes happen under a lock, so one instance can be shared by
    concurrent chat requests.

    Example:
        >>> breaker = CircuitBreaker(name="openai:gpt-4o")
        >>> if breaker.can_request():
        ...     result = await provider.call("gpt-4o", messages)
        ...     breaker.record_success() if result.success else breaker.record_failure()
    """

    def __init__(
        self,
        name: str,
        config: CircuitBreakerConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize circuit breaker.

        Args:
            name: Identifier for this breaker (the model identity)
            config: Thresholds (uses defaults if None)
            clock: Monotonic clock in seconds, injectable for tests
        """
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._last_failure_time: float | None = None
        self._metrics = CircuitBreakerMetrics()
        self._lock = threading.Lock()

    @property
    def state(self) -> CircuitState:
        """Current circuit state (no lazy transition)."""
        return self._state

    @property
    def failures(self) -> int:
        """Consecutive failures since the last success."""
        return self._failures

    @property
    def metrics(self) -> CircuitBreakerMetrics:
        return self._metrics

    def _transition_to(self, new_state: CircuitState) -> None:
        if new_state == self._state:
            return
        old_state = self._state
        self._state = new_state
        self._metrics.state_changes += 1
        logger.info(
            f"Circuit breaker '{self.name}' state change: {old_state.value} → {new_state.value}"
        )

    def can_request(self) -> bool:
        """Check whether a request may be sent.

        An OPEN circuit whose reset timeout has elapsed moves to HALF_OPEN
        here and lets the request through.
        """
        with self._lock:
            if self._state != CircuitState.OPEN:
                return True

            elapsed_ms = (self._clock() - (self._last_failure_time or 0.0)) * 1000
            if elapsed_ms > self.config.reset_timeout_ms:
                self._transition_to(CircuitState.HALF_OPEN)
                return True

            self._metrics.rejected_calls += 1
            return False

    def record_success(self) -> None:
        """Record a successful call: close the circuit and clear failures."""
        with self._lock:
            self._metrics.successful_calls += 1
            self._failures = 0
            if self._state != CircuitState.CLOSED:
                logger.info(f"Circuit breaker '{self.name}' recovered")
            self._transition_to(CircuitState.CLOSED)

    def record_failure(self) -> None:
        """Record a failed call, opening the circuit at the threshold."""
        with self._lock:
            self._metrics.failed_calls += 1
            self._failures += 1
            self._last_failure_time = self._clock()

            if self._failures >= self.config.failure_threshold:
                if self._state != CircuitState.OPEN:
                    logger.warning(
                        f"Circuit breaker '{self.name}' opened after "
                        f"{self._failures} consecutive failures"
                    )
                self._transition_to(CircuitState.OPEN)

    def reset(self) -> None:
        """Reset circuit breaker to initial state."""
        with self._lock:
            self._state = CircuitState.CLOSED
            self._failures = 0
            self._last_failure_time = None
            self._metrics = CircuitBreakerMetrics()
        logger.info(f"Circuit breaker '{self.name}' reset to CLOSED state")

    def get_status(self) -> dict[str, Any]:
        """Get detailed status for monitoring."""
        return {
            "name": self.name,
            "state": self._state.value,
            "failures": self._failures,
            "metrics": {
                "successful_calls": self._metrics.successful_calls,
                "failed_calls": self._metrics.failed_calls,
                "rejected_calls": self._metrics.rejected_calls,
                "state_changes": self._metrics.state_changes,
            },
            "config": {
                "failure_threshold": self.config.failure_threshold,
                "reset_timeout_ms": self.config.reset_timeout_ms,
            },
        }


class CircuitBreakerRegistry:
    """Hands out one breaker per model identity.

    Share a registry between orchestrators so failures are learned globally.
    """

    def __init__(
        self,
        config: CircuitBreakerConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or CircuitBreakerConfig()
        self._clock = clock
        self._breakers: dict[str, CircuitBreaker] = {}
        self._lock = threading.Lock()

    def get(self, model: str) -> CircuitBreaker:
        """Breaker for ``model``, created on first use."""
        with self._lock:
            breaker = self._breakers.get(model)
            if breaker is None:
                breaker = CircuitBreaker(name=model, config=self.config, clock=self._clock)
                self._breakers[model] = breaker
            return breaker

    def _snapshot(self) -> list[tuple[str, CircuitBreaker]]:
        with self._lock:
            return list(self._breakers.items())

    def get_all_status(self) -> dict[str, dict[str, Any]]:
        return {name: breaker.get_status() for name, breaker in self._snapshot()}

    def reset_all(self) -> None:
        for _, breaker in self._snapshot():
            breaker.reset()
