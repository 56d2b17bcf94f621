"""Unit tests for the persona prompt template.

Tests prompt loading, formatting, and error handling.
"""

import pytest

from veritas.core.models import Depth
from veritas.llm import PromptTemplate, PromptTemplateError, build_system_prompt
from veritas.llm.prompts import DEPTH_GUIDANCE


class TestPromptTemplate:
    """Test PromptTemplate loading and formatting."""

    def test_load_persona_template(self) -> None:
        template = PromptTemplate.load("veritas")
        assert "VERITAS" in template.template
        assert "{depth}" in template.template
        assert "{depth_guidance}" in template.template

    def test_load_missing_template(self) -> None:
        with pytest.raises(PromptTemplateError, match="Template not found"):
            PromptTemplate.load("does_not_exist")

    def test_format_missing_variable(self) -> None:
        template = PromptTemplate("Layer: {depth}")
        with pytest.raises(PromptTemplateError, match="Missing required variable"):
            template.format()


class TestBuildSystemPrompt:
    """Test depth framing of the system prompt."""

    @pytest.mark.parametrize("depth", list(Depth))
    def test_every_depth_has_guidance(self, depth: Depth) -> None:
        prompt = build_system_prompt(depth)
        assert f"Current layer: {depth.value}" in prompt
        assert DEPTH_GUIDANCE[depth] in prompt

    def test_default_depth_is_surface(self) -> None:
        assert "Current layer: SURFACE" in build_system_prompt()

    def test_override_replaces_template(self) -> None:
        assert build_system_prompt(Depth.DEEP, override="Be brief.") == "Be brief."
