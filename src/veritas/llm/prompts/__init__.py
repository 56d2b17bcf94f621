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

"""Prompt templates for VERITAS.

Templates are stored as .txt files next to this module and support
``str.format`` variable substitution.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from veritas.core.models import Depth

DEPTH_GUIDANCE: dict[Depth, str] = {
    Depth.SURFACE: "Prefer well-known public sources: news outlets, encyclopedias, official sites.",
    Depth.DEEP: "Prefer academic papers, technical documentation, standards and specialist databases.",
    Depth.DARK: (
        "Look for suppressed, censored or deleted material. Mark anything you cannot "
        "verify independently as unverified."
    ),
    Depth.VAULT: (
        "Prefer historical archives, government records, court filings and snapshot "
        "services such as the Wayback Machine."
    ),
}


class PromptTemplateError(Exception):
    """Raised when there's an error loading or formatting a prompt template."""

    pass


class PromptTemplate:
    """A prompt template with ``{placeholder}`` variables.

    Example:
        >>> template = PromptTemplate.load("veritas")
        >>> prompt = template.format(depth="DEEP", depth_guidance="...")
    """

    def __init__(self, template_text: str):
        self.template = template_text

    @classmethod
    def load(cls, name: str) -> PromptTemplate:
        """Load a bundled template by name.

        Raises:
            PromptTemplateError: If the template file doesn't exist
        """
        template_file = Path(__file__).parent / f"{name}.txt"

        if not template_file.exists():
            raise PromptTemplateError(f"Template not found: {name} (expected: {template_file})")

        try:
            return cls(template_file.read_text(encoding="utf-8"))
        except OSError as e:
            raise PromptTemplateError(f"Error reading template {name}: {e}") from e

    def format(self, **kwargs: Any) -> str:
        """Format the template with provided variables.

        Raises:
            PromptTemplateError: If a required variable is missing
        """
        try:
            return self.template.format(**kwargs)
        except KeyError as e:
            raise PromptTemplateError(f"Missing required variable: {e}") from e


def build_system_prompt(depth: Depth | None = None, override: str | None = None) -> str:
    """Build the persona system prompt for a knowledge layer.

    Args:
        depth: Knowledge layer (SURFACE when None)
        override: Custom system prompt that replaces the bundled template

    Returns:
        System prompt text
    """
    if override:
        return override
    depth = depth or Depth.SURFACE
    return PromptTemplate.load("veritas").format(
        depth=depth.value,
        depth_guidance=DEPTH_GUIDANCE[depth],
    ).strip()


__all__ = ["DEPTH_GUIDANCE", "PromptTemplate", "PromptTemplateError", "build_system_prompt"]
