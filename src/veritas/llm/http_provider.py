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

"""Raw HTTP adapter for OpenAI-compatible chat completion endpoints.

Talks to ``{base_url}/chat/completions`` directly with aiohttp. Registered
twice by default: against api.openai.com as the fallback for the SDK adapter,
and against a local Ollama server.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import aiohttp

from veritas.core.models import ChatMessage

from .base import (
    BaseLLMProvider,
    LLMConnectionError,
    LLMError,
    LLMTimeoutError,
    error_for_status,
)

OPENAI_BASE_URL = "https://api.openai.com/v1"
OLLAMA_BASE_URL = "http://localhost:11434/v1"


class OpenAICompatibleHTTPProvider(BaseLLMProvider):
    """Chat completions over plain HTTP.

    Example:
        >>> provider = OpenAICompatibleHTTPProvider(api_key="sk-...")
        >>> result = await provider.call("gpt-4o", messages)
        >>>
        >>> ollama = OpenAICompatibleHTTPProvider(base_url=OLLAMA_BASE_URL, family="ollama")
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = OPENAI_BASE_URL,
        family: str = "openai-http",
        timeout: float = 60.0,
        **kwargs: Any,
    ):
        """Initialize HTTP provider.

        Args:
            api_key: Bearer token (None for servers without auth, e.g. Ollama)
            base_url: API base URL without the ``/chat/completions`` suffix
            family: Registry key this instance is registered under
            timeout: Total socket timeout in seconds
            **kwargs: Default temperature / max tokens
        """
        super().__init__(**kwargs)
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.family = family
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _check_response_status(self, response: aiohttp.ClientResponse) -> None:
        """Raise the ``LLMError`` matching a non-200 response."""
        if response.status == 200:
            return
        error_text = await response.text()
        raise error_for_status(
            response.status, f"{self.family} API error (status {response.status}): {error_text}"
        )

    @staticmethod
    def _extract_text(result: dict[str, Any]) -> str | None:
        choices = result.get("choices")
        if not choices:
            return None
        message = choices[0].get("message") or {}
        content = message.get("content")
        return str(content) if content else None

    async def _complete(
        self,
        model: str,
        messages: Sequence[ChatMessage],
        temperature: float,
        max_tokens: int,
        **kwargs: Any,
    ) -> str:
        url = f"{self.base_url}/chat/completions"
        payload = {
            "model": model,
            "messages": [m.to_dict() for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
            **kwargs,
        }

        try:
            async with (
                aiohttp.ClientSession(timeout=self.timeout) as session,
                session.post(url, headers=self._headers(), json=payload) as response,
            ):
                await self._check_response_status(response)
                result = await response.json()
        except aiohttp.ServerTimeoutError as e:
            raise LLMTimeoutError(f"{self.family} request timed out: {e}") from e
        except aiohttp.ContentTypeError as e:
            raise LLMError(f"{self.family} returned non-JSON body: {e}") from e
        except aiohttp.ClientError as e:
            raise LLMConnectionError(f"{self.family} connection failed: {e}") from e

        text = self._extract_text(result) if isinstance(result, dict) else None
        if text is None:
            raise LLMError(f"Unexpected {self.family} response format: {result}")
        return text
