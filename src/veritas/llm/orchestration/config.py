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

"""Configuration models for request orchestration.

All configuration objects are frozen dataclasses validated on construction.
They are built once at process start (see ``veritas.utils.config``) and
passed into the orchestrator explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_MODEL_CHAIN: tuple[str, ...] = (
    "openai:gpt-4o",
    "openai-http:gpt-4o",
    "anthropic:claude-3-5-sonnet-20241022",
    "ollama:mistral",
)


class ConfigurationError(ValueError):
    """Raised when orchestration configuration is invalid."""


@dataclass(frozen=True)
class CircuitBreakerConfig:
    """Configuration for circuit breaker behavior.

    Attributes:
        failure_threshold: Consecutive failures before the circuit opens
        reset_timeout_ms: Time since the last failure before a probe is allowed.
            0 is accepted; the breaker then never stays open.
    """

    failure_threshold: int = 5
    reset_timeout_ms: int = 60_000

    def __post_init__(self) -> None:
        if self.failure_threshold < 1:
            raise ConfigurationError(
                f"failure_threshold must be a positive integer, got {self.failure_threshold}"
            )
        if self.reset_timeout_ms < 0:
            raise ConfigurationError(
                f"reset_timeout_ms must not be negative, got {self.reset_timeout_ms}"
            )


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        max_attempts: Attempts per model, including the first one
        base_delay_ms: Delay before the second attempt
        max_delay_ms: Upper bound for any single delay
    """

    max_attempts: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 10_000

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigurationError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.base_delay_ms < 0:
            raise ConfigurationError(f"base_delay_ms must be >= 0, got {self.base_delay_ms}")
        if self.max_delay_ms < self.base_delay_ms:
            raise ConfigurationError(
                f"max_delay_ms ({self.max_delay_ms}) must be >= base_delay_ms "
                f"({self.base_delay_ms})"
            )

    def get_delay_ms(self, attempt: int) -> int:
        """Delay to wait before ``attempt`` (1-indexed).

        Attempt 1 starts immediately; attempt k waits
        ``min(base_delay_ms * 2**(k-2), max_delay_ms)``.
        """
        if attempt <= 1:
            return 0
        return min(self.base_delay_ms * (2 ** (attempt - 2)), self.max_delay_ms)


@dataclass(frozen=True)
class OrchestratorConfig:
    """Configuration for the request orchestrator.

    Attributes:
        models: Candidate model identifiers in priority order (``family:model``)
        retry: Per-model retry policy
        circuit_breaker: Policy for the per-model circuit breakers
        timeout_ms: Deadline for each provider call
        history_window: Non-system messages kept from the conversation
            (None keeps everything)
    """

    models: tuple[str, ...] = DEFAULT_MODEL_CHAIN
    retry: RetryConfig = field(default_factory=RetryConfig)
    circuit_breaker: CircuitBreakerConfig = field(default_factory=CircuitBreakerConfig)
    timeout_ms: int = 30_000
    history_window: int | None = None

    def __post_init__(self) -> None:
        # Accept any sequence but store an immutable tuple
        object.__setattr__(self, "models", tuple(self.models))
        if not self.models:
            raise ConfigurationError("At least one model must be configured")
        if self.timeout_ms <= 0:
            raise ConfigurationError(f"timeout_ms must be > 0, got {self.timeout_ms}")
        if self.history_window is not None and self.history_window < 1:
            raise ConfigurationError(
                f"history_window must be >= 1 or None, got {self.history_window}"
            )
