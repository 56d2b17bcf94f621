"""Configuration management for VERITAS.

Handles API keys, the model chain and resilience settings using Pydantic
Settings. Supports environment variables and .env files.
"""

from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from veritas.llm.orchestration.config import (
    DEFAULT_MODEL_CHAIN,
    CircuitBreakerConfig,
    OrchestratorConfig,
    RetryConfig,
)


class Settings(BaseSettings):
    """Application settings.

    Loads configuration from environment variables or .env file.
    All settings can be overridden via environment variables with VERITAS_
    prefix. The OpenAI key and base URL are also read from the
    ``AI_INTEGRATIONS_OPENAI_*`` and ``OPENAI_*`` variables.

    Example .env file:
        VERITAS_OPENAI_API_KEY=sk-...
        VERITAS_ANTHROPIC_API_KEY=sk-ant-...
        VERITAS_OLLAMA_BASE_URL=http://localhost:11434/v1
        VERITAS_MODELS=openai:gpt-4o,ollama:mistral
        VERITAS_MAX_ATTEMPTS=3

    Example usage:
        >>> settings = Settings()
        >>> settings.model_chain
        ('openai:gpt-4o', 'openai-http:gpt-4o', ...)
    """

    # Provider credentials
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key",
        validation_alias=AliasChoices(
            "VERITAS_OPENAI_API_KEY", "AI_INTEGRATIONS_OPENAI_API_KEY", "OPENAI_API_KEY"
        ),
    )

    openai_base_url: str | None = Field(
        default=None,
        description="Alternative OpenAI API base URL",
        validation_alias=AliasChoices(
            "VERITAS_OPENAI_BASE_URL", "AI_INTEGRATIONS_OPENAI_BASE_URL", "OPENAI_BASE_URL"
        ),
    )

    anthropic_api_key: str | None = Field(
        default=None,
        description="Anthropic API key",
        validation_alias=AliasChoices("VERITAS_ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY"),
    )

    ollama_base_url: str | None = Field(
        default=None,
        description="Base URL of an Ollama server (OpenAI-compatible API); unset disables it",
    )

    # Model chain
    models: str = Field(
        default=",".join(DEFAULT_MODEL_CHAIN),
        description="Comma-separated model identifiers (family:model) in priority order",
    )

    stream: bool = Field(default=False, description="Stream SDK replies and collapse them")

    # Retry / circuit breaker / timeout
    max_attempts: int = Field(default=3, ge=1, description="Attempts per model")
    base_delay_ms: int = Field(default=1000, ge=0, description="Delay before the 2nd attempt")
    max_delay_ms: int = Field(default=10_000, ge=0, description="Cap for any backoff delay")
    failure_threshold: int = Field(default=5, ge=1, description="Failures before a circuit opens")
    reset_timeout_ms: int = Field(
        default=60_000, ge=0, description="Time before an open circuit lets a probe through"
    )
    timeout_ms: int = Field(default=30_000, gt=0, description="Deadline for each provider call")

    # Conversation
    history_window: int | None = Field(
        default=None, ge=1, description="Non-system messages sent per request (unset = all)"
    )
    system_prompt: str | None = Field(
        default=None, description="Custom persona prompt replacing the bundled one"
    )

    # Sampling defaults
    temperature: float = Field(default=0.85, ge=0.0, le=2.0)
    max_tokens: int = Field(default=800, gt=0)

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VERITAS_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def model_chain(self) -> tuple[str, ...]:
        """Configured model identifiers in priority order."""
        return tuple(m.strip() for m in self.models.split(",") if m.strip())

    def get_llm_provider_credentials(self, family: str) -> dict[str, str]:
        """Get credentials for a model family.

        Raises:
            ValueError: If credentials are not configured or the family is unknown

        Example:
            >>> settings.get_llm_provider_credentials("openai")
            {"api_key": "sk-..."}
        """
        if family in ("openai", "openai-http"):
            if not self.openai_api_key:
                raise ValueError("OpenAI API key not configured. Set VERITAS_OPENAI_API_KEY")
            creds = {"api_key": self.openai_api_key}
            if self.openai_base_url:
                creds["base_url"] = self.openai_base_url
            return creds

        if family == "anthropic":
            if not self.anthropic_api_key:
                raise ValueError("Anthropic API key not configured. Set VERITAS_ANTHROPIC_API_KEY")
            return {"api_key": self.anthropic_api_key}

        if family == "ollama":
            if not self.ollama_base_url:
                raise ValueError("Ollama base URL not configured. Set VERITAS_OLLAMA_BASE_URL")
            return {"base_url": self.ollama_base_url}

        raise ValueError(f"Unknown model family: {family}")

    def to_orchestrator_config(self) -> OrchestratorConfig:
        """Build the immutable orchestrator configuration.

        Raises:
            ConfigurationError: If the combination of values is invalid
        """
        return OrchestratorConfig(
            models=self.model_chain,
            retry=RetryConfig(
                max_attempts=self.max_attempts,
                base_delay_ms=self.base_delay_ms,
                max_delay_ms=self.max_delay_ms,
            ),
            circuit_breaker=CircuitBreakerConfig(
                failure_threshold=self.failure_threshold,
                reset_timeout_ms=self.reset_timeout_ms,
            ),
            timeout_ms=self.timeout_ms,
            history_window=self.history_window,
        )


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
