"""Shared pytest fixtures for VERITAS tests.

Provides a scripted fake provider adapter, a fake clock and helpers for
building orchestrators that never sleep.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

import pytest

from veritas.core.models import ChatMessage, Role
from veritas.llm.base import BaseLLMProvider
from veritas.llm.orchestration import (
    CircuitBreakerConfig,
    CircuitBreakerRegistry,
    OrchestratorConfig,
    RequestOrchestrator,
    RetryConfig,
    RetryController,
)
from veritas.llm.registry import ProviderRegistry

# ============================================================================
# Fake provider
# ============================================================================


class FakeProvider(BaseLLMProvider):
    """Provider adapter that replays a script instead of calling an API.

    Each entry of ``script`` is consumed by one call: strings are returned
    as the reply text, exceptions are raised. The last entry repeats once the
    script runs out.
    """

    def __init__(
        self,
        script: Sequence[str | BaseException] = ("ok",),
        family: str = "fake",
        delay: float = 0.0,
    ):
        super().__init__()
        self.script = list(script)
        self.family = family
        self.delay = delay
        self.calls: list[dict[str, Any]] = []
        self.outcomes: list[str] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def _complete(
        self,
        model: str,
        messages: Sequence[ChatMessage],
        temperature: float,
        max_tokens: int,
        **kwargs: Any,
    ) -> str:
        self.calls.append(
            {
                "model": model,
                "messages": list(messages),
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if self.delay:
            try:
                await asyncio.sleep(self.delay)
            except asyncio.CancelledError:
                self.outcomes.append("cancelled")
                raise
        self.outcomes.append("completed")

        index = min(len(self.calls) - 1, len(self.script) - 1)
        step = self.script[index]
        if isinstance(step, BaseException):
            raise step
        return step


class FakeClock:
    """Manually advanced monotonic clock (seconds)."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000


class RecordingSleep:
    """Async sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def make_orchestrator(
    providers: dict[str, BaseLLMProvider],
    models: Sequence[str],
    max_attempts: int = 3,
    failure_threshold: int = 5,
    reset_timeout_ms: int = 60_000,
    timeout_ms: int = 30_000,
    history_window: int | None = None,
    clock: FakeClock | None = None,
    sleep: RecordingSleep | None = None,
) -> RequestOrchestrator:
    """Build an orchestrator over fake providers with instant backoff."""
    registry = ProviderRegistry()
    for family, provider in providers.items():
        registry.register(family, provider)

    config = OrchestratorConfig(
        models=tuple(models),
        retry=RetryConfig(max_attempts=max_attempts, base_delay_ms=1000, max_delay_ms=10_000),
        circuit_breaker=CircuitBreakerConfig(
            failure_threshold=failure_threshold, reset_timeout_ms=reset_timeout_ms
        ),
        timeout_ms=timeout_ms,
        history_window=history_window,
    )
    breakers = CircuitBreakerRegistry(config.circuit_breaker, clock=clock or FakeClock())
    return RequestOrchestrator(
        registry,
        config,
        breakers=breakers,
        retry_controller=RetryController(config.retry, sleep=sleep or RecordingSleep()),
    )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def fake_provider_class() -> type[FakeProvider]:
    """Provide FakeProvider for tests that need custom scripts."""
    return FakeProvider


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def user_messages() -> list[ChatMessage]:
    """A short conversation with a system prompt."""
    return [
        ChatMessage(role=Role.SYSTEM, content="You are VERITAS."),
        ChatMessage(role=Role.USER, content="Who discovered penicillin?"),
    ]


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove provider credentials from the environment."""
    for name in (
        "OPENAI_API_KEY",
        "OPENAI_BASE_URL",
        "AI_INTEGRATIONS_OPENAI_API_KEY",
        "AI_INTEGRATIONS_OPENAI_BASE_URL",
        "ANTHROPIC_API_KEY",
        "VERITAS_OPENAI_API_KEY",
        "VERITAS_OPENAI_BASE_URL",
        "VERITAS_ANTHROPIC_API_KEY",
        "VERITAS_OLLAMA_BASE_URL",
        "VERITAS_MODELS",
        "VERITAS_HISTORY_WINDOW",
        "VERITAS_MAX_ATTEMPTS",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
