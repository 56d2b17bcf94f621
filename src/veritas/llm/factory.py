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

"""Construction of adapters and the orchestrator from settings."""

from __future__ import annotations

import logging

from veritas.utils.config import Settings

from .anthropic_provider import AnthropicProvider
from .http_provider import OPENAI_BASE_URL, OpenAICompatibleHTTPProvider
from .openai_provider import OpenAIProvider
from .orchestration import CircuitBreakerRegistry, RequestOrchestrator
from .registry import ProviderRegistry

logger = logging.getLogger(__name__)


def build_registry(settings: Settings) -> ProviderRegistry:
    """Register an adapter for every family whose credentials are configured.

    Families without credentials are left out; their models are then skipped
    by the orchestrator.
    """
    registry = ProviderRegistry()
    timeout = settings.timeout_ms / 1000
    defaults = {
        "default_temperature": settings.temperature,
        "default_max_tokens": settings.max_tokens,
    }

    if settings.openai_api_key:
        creds = settings.get_llm_provider_credentials("openai")
        registry.register(
            "openai",
            OpenAIProvider(
                api_key=creds["api_key"],
                base_url=creds.get("base_url"),
                timeout=timeout,
                stream=settings.stream,
                **defaults,
            ),
        )
        registry.register(
            "openai-http",
            OpenAICompatibleHTTPProvider(
                api_key=creds["api_key"],
                base_url=creds.get("base_url") or OPENAI_BASE_URL,
                family="openai-http",
                timeout=timeout,
                **defaults,
            ),
        )
    else:
        logger.warning("OpenAI API key not set; openai models will be skipped")

    if settings.anthropic_api_key:
        creds = settings.get_llm_provider_credentials("anthropic")
        registry.register(
            "anthropic", AnthropicProvider(api_key=creds["api_key"], timeout=timeout, **defaults)
        )

    if settings.ollama_base_url:
        creds = settings.get_llm_provider_credentials("ollama")
        registry.register(
            "ollama",
            OpenAICompatibleHTTPProvider(
                base_url=creds["base_url"], family="ollama", timeout=timeout, **defaults
            ),
        )

    return registry


def build_orchestrator(
    settings: Settings,
    breakers: CircuitBreakerRegistry | None = None,
) -> RequestOrchestrator:
    """Build an orchestrator from settings.

    Args:
        settings: Loaded settings
        breakers: Breaker registry shared with other orchestrators, if any
    """
    config = settings.to_orchestrator_config()
    return RequestOrchestrator(
        registry=build_registry(settings),
        config=config,
        breakers=breakers or CircuitBreakerRegistry(config.circuit_breaker),
    )
