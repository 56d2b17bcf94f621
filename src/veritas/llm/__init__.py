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

"""LLM integration layer for VERITAS.

Provides the adapter interface, concrete adapters for OpenAI, Anthropic and
OpenAI-compatible HTTP endpoints, and the family registry.
"""

from .anthropic_provider import AnthropicProvider
from .base import (
    BaseLLMProvider,
    LLMAuthenticationError,
    LLMConnectionError,
    LLMError,
    LLMInvalidRequestError,
    LLMRateLimitError,
    LLMTimeoutError,
)
from .cancellation import CancellationToken, OperationCancelledError
from .http_provider import OpenAICompatibleHTTPProvider
from .openai_provider import OpenAIProvider
from .prompts import PromptTemplate, PromptTemplateError, build_system_prompt
from .registry import ProviderRegistry

__all__ = [
    "AnthropicProvider",
    "BaseLLMProvider",
    "CancellationToken",
    "LLMAuthenticationError",
    "LLMConnectionError",
    "LLMError",
    "LLMInvalidRequestError",
    "LLMRateLimitError",
    "LLMTimeoutError",
    "OpenAICompatibleHTTPProvider",
    "OpenAIProvider",
    "OperationCancelledError",
    "PromptTemplate",
    "PromptTemplateError",
    "ProviderRegistry",
    "build_system_prompt",
]
