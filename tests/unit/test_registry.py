"""Unit tests for the model family registry."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

tests_dir = Path(__file__).parent.parent
sys.path.insert(0, str(tests_dir))

from conftest import FakeProvider  # noqa: E402

from veritas.llm.registry import ProviderRegistry, split_model_identifier  # noqa: E402


@pytest.mark.unit
class TestSplitModelIdentifier:
    @pytest.mark.parametrize(
        ("identifier", "expected"),
        [
            ("openai:gpt-4o", ("openai", "gpt-4o")),
            ("OpenAI:gpt-4o", ("openai", "gpt-4o")),
            ("ollama:llama3:8b", ("ollama", "llama3:8b")),
            (" anthropic : claude-3-5-sonnet-20241022 ", ("anthropic", "claude-3-5-sonnet-20241022")),
            ("gpt-4o", None),
            (":gpt-4o", None),
            ("openai:", None),
        ],
    )
    def test_split(self, identifier: str, expected: tuple[str, str] | None) -> None:
        assert split_model_identifier(identifier) == expected


@pytest.mark.unit
class TestProviderRegistry:
    def test_resolve_registered_family(self) -> None:
        provider = FakeProvider()
        registry = ProviderRegistry()
        registry.register("openai", provider)

        assert registry.resolve("openai:gpt-4o") == (provider, "gpt-4o")
        assert "openai" in registry
        assert registry.families() == ["openai"]

    def test_unknown_family(self) -> None:
        registry = ProviderRegistry()
        registry.register("openai", FakeProvider())

        assert registry.resolve("mystery:model") is None
        assert registry.resolve("malformed") is None

    def test_register_replaces(self) -> None:
        first, second = FakeProvider(), FakeProvider()
        registry = ProviderRegistry()
        registry.register("ollama", first)
        registry.register("ollama", second)

        assert registry.resolve("ollama:mistral") == (second, "mistral")

    def test_unregister(self) -> None:
        registry = ProviderRegistry()
        registry.register("ollama", FakeProvider())
        registry.unregister("ollama")

        assert "ollama" not in registry
        assert registry.resolve("ollama:mistral") is None

    @pytest.mark.parametrize("family", ["", "  ", "a:b"])
    def test_invalid_family_rejected(self, family: str) -> None:
        with pytest.raises(ValueError):
            ProviderRegistry().register(family, FakeProvider())
