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

"""Model family registry.

Model identifiers have the form ``family:model`` (``openai:gpt-4o``,
``ollama:mistral``). The family selects a registered adapter; the rest is
passed to that adapter as the model name.
"""

from __future__ import annotations

import logging

from .base import BaseLLMProvider

logger = logging.getLogger(__name__)

FAMILY_SEPARATOR = ":"


def split_model_identifier(identifier: str) -> tuple[str, str] | None:
    """Split ``family:model`` into its parts.

    Returns:
        (family, model), or None when either part is missing
    """
    family, sep, model = identifier.partition(FAMILY_SEPARATOR)
    family, model = family.strip().lower(), model.strip()
    if not sep or not family or not model:
        return None
    return family, model


class ProviderRegistry:
    """Maps model families to provider adapters.

    Example:
        >>> registry = ProviderRegistry()
        >>> registry.register("openai", OpenAIProvider(api_key="sk-..."))
        >>> adapter, model = registry.resolve("openai:gpt-4o")
    """

    def __init__(self) -> None:
        self._providers: dict[str, BaseLLMProvider] = {}

    def register(self, family: str, provider: BaseLLMProvider) -> None:
        """Register ``provider`` under ``family``, replacing any previous one."""
        key = family.strip().lower()
        if not key or FAMILY_SEPARATOR in key:
            raise ValueError(f"Invalid model family: {family!r}")
        self._providers[key] = provider
        logger.info(f"Registered provider family '{key}' ({type(provider).__name__})")

    def unregister(self, family: str) -> None:
        self._providers.pop(family.strip().lower(), None)

    def families(self) -> list[str]:
        """Registered family keys in registration order."""
        return list(self._providers)

    def __contains__(self, family: object) -> bool:
        return isinstance(family, str) and family.strip().lower() in self._providers

    def resolve(self, identifier: str) -> tuple[BaseLLMProvider, str] | None:
        """Find the adapter for a model identifier.

        Returns:
            (adapter, model name), or None if the family is unknown
        """
        parts = split_model_identifier(identifier)
        if parts is None:
            return None
        family, model = parts
        provider = self._providers.get(family)
        if provider is None:
            return None
        return provider, model
