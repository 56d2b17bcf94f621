"""Unit tests for configuration module.

Tests Settings, credential management and construction of the orchestrator
from settings.
"""

import pytest

from veritas.llm.anthropic_provider import AnthropicProvider
from veritas.llm.factory import build_orchestrator, build_registry
from veritas.llm.http_provider import OPENAI_BASE_URL, OpenAICompatibleHTTPProvider
from veritas.llm.openai_provider import OpenAIProvider
from veritas.llm.orchestration import (
    DEFAULT_MODEL_CHAIN,
    CircuitBreakerRegistry,
    ConfigurationError,
    OrchestratorConfig,
)
from veritas.utils.config import Settings, get_settings


@pytest.mark.unit
class TestSettings:
    """Test Settings functionality."""

    def test_defaults(self, clean_env: pytest.MonkeyPatch) -> None:
        settings = Settings(_env_file=None)

        assert settings.openai_api_key is None
        assert settings.model_chain == DEFAULT_MODEL_CHAIN
        assert settings.max_attempts == 3
        assert settings.base_delay_ms == 1000
        assert settings.max_delay_ms == 10_000
        assert settings.failure_threshold == 5
        assert settings.reset_timeout_ms == 60_000
        assert settings.timeout_ms == 30_000
        assert settings.history_window is None
        assert settings.temperature == 0.85
        assert settings.max_tokens == 800

    def test_prefixed_env(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("VERITAS_MODELS", "ollama:mistral, openai:gpt-4o-mini ,")
        clean_env.setenv("VERITAS_HISTORY_WINDOW", "6")

        settings = Settings(_env_file=None)

        assert settings.model_chain == ("ollama:mistral", "openai:gpt-4o-mini")
        assert settings.history_window == 6

    @pytest.mark.parametrize(
        "env_name", ["VERITAS_OPENAI_API_KEY", "AI_INTEGRATIONS_OPENAI_API_KEY", "OPENAI_API_KEY"]
    )
    def test_openai_key_aliases(self, clean_env: pytest.MonkeyPatch, env_name: str) -> None:
        clean_env.setenv(env_name, "sk-from-env")
        assert Settings(_env_file=None).openai_api_key == "sk-from-env"

    def test_integrations_base_url(self, clean_env: pytest.MonkeyPatch) -> None:
        clean_env.setenv("AI_INTEGRATIONS_OPENAI_BASE_URL", "https://gateway.local/v1")
        assert Settings(_env_file=None).openai_base_url == "https://gateway.local/v1"

    def test_invalid_values_rejected(self, clean_env: pytest.MonkeyPatch) -> None:
        with pytest.raises(ValueError):
            Settings(_env_file=None, max_attempts=0)
        with pytest.raises(ValueError):
            Settings(_env_file=None, temperature=3.0)

    def test_get_llm_provider_credentials(self, clean_env: pytest.MonkeyPatch) -> None:
        settings = Settings(
            _env_file=None,
            openai_api_key="sk-test",
            openai_base_url="https://gateway.local/v1",
            anthropic_api_key="sk-ant-test",
            ollama_base_url="http://localhost:11434/v1",
        )

        assert settings.get_llm_provider_credentials("openai") == {
            "api_key": "sk-test",
            "base_url": "https://gateway.local/v1",
        }
        assert settings.get_llm_provider_credentials("anthropic") == {"api_key": "sk-ant-test"}
        assert settings.get_llm_provider_credentials("ollama") == {
            "base_url": "http://localhost:11434/v1"
        }

    def test_missing_credentials(self, clean_env: pytest.MonkeyPatch) -> None:
        settings = Settings(_env_file=None)

        with pytest.raises(ValueError, match="OpenAI API key not configured"):
            settings.get_llm_provider_credentials("openai")
        with pytest.raises(ValueError, match="Unknown model family"):
            settings.get_llm_provider_credentials("mystery")

    def test_to_orchestrator_config(self, clean_env: pytest.MonkeyPatch) -> None:
        settings = Settings(
            _env_file=None,
            models="openai:gpt-4o,ollama:mistral",
            max_attempts=2,
            failure_threshold=3,
            timeout_ms=5000,
            history_window=4,
        )

        config = settings.to_orchestrator_config()

        assert isinstance(config, OrchestratorConfig)
        assert config.models == ("openai:gpt-4o", "ollama:mistral")
        assert config.retry.max_attempts == 2
        assert config.circuit_breaker.failure_threshold == 3
        assert config.timeout_ms == 5000
        assert config.history_window == 4

    def test_inconsistent_delays_rejected(self, clean_env: pytest.MonkeyPatch) -> None:
        settings = Settings(_env_file=None, base_delay_ms=5000, max_delay_ms=1000)
        with pytest.raises(ConfigurationError):
            settings.to_orchestrator_config()

    def test_empty_model_chain_rejected(self, clean_env: pytest.MonkeyPatch) -> None:
        settings = Settings(_env_file=None, models=" , ")
        with pytest.raises(ConfigurationError):
            settings.to_orchestrator_config()

    def test_get_settings_singleton(self) -> None:
        assert get_settings() is get_settings()


@pytest.mark.unit
class TestOrchestratorConfig:
    def test_models_stored_as_tuple(self) -> None:
        assert OrchestratorConfig(models=["a:x", "b:y"]).models == ("a:x", "b:y")

    @pytest.mark.parametrize(
        "kwargs", [{"timeout_ms": 0}, {"history_window": 0}, {"models": ()}]
    )
    def test_invalid(self, kwargs: dict) -> None:
        with pytest.raises(ConfigurationError):
            OrchestratorConfig(**kwargs)


@pytest.mark.unit
class TestFactory:
    """Adapters are registered for configured credentials only."""

    def test_no_credentials(self, clean_env: pytest.MonkeyPatch) -> None:
        registry = build_registry(Settings(_env_file=None))
        assert registry.families() == []

    def test_all_families(self, clean_env: pytest.MonkeyPatch) -> None:
        settings = Settings(
            _env_file=None,
            openai_api_key="sk-test",
            anthropic_api_key="sk-ant-test",
            ollama_base_url="http://localhost:11434/v1",
        )

        registry = build_registry(settings)

        assert registry.families() == ["openai", "openai-http", "anthropic", "ollama"]
        sdk, model = registry.resolve("openai:gpt-4o")
        assert isinstance(sdk, OpenAIProvider)
        assert model == "gpt-4o"
        http, _ = registry.resolve("openai-http:gpt-4o")
        assert isinstance(http, OpenAICompatibleHTTPProvider)
        assert http.base_url == OPENAI_BASE_URL
        assert isinstance(registry.resolve("anthropic:claude-3-5-sonnet-20241022")[0], AnthropicProvider)
        ollama, _ = registry.resolve("ollama:mistral")
        assert ollama.family == "ollama"
        assert ollama.default_temperature == 0.85

    def test_build_orchestrator_shares_breakers(self, clean_env: pytest.MonkeyPatch) -> None:
        settings = Settings(_env_file=None, models="ollama:mistral", ollama_base_url="http://x/v1")
        breakers = CircuitBreakerRegistry()

        first = build_orchestrator(settings, breakers=breakers)
        second = build_orchestrator(settings, breakers=breakers)

        assert first.breakers is second.breakers
        assert first.config.models == ("ollama:mistral",)
