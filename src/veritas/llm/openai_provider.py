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

"""OpenAI provider adapter.

Uses the official OpenAI Python SDK (v1.0+) against the chat completions
endpoint. The SDK's own retries are disabled; retrying is the
orchestrator's job.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import openai

from veritas.core.models import ChatMessage

from .base import (
    BaseLLMProvider,
    LLMAuthenticationError,
    LLMConnectionError,
    LLMError,
    LLMInvalidRequestError,
    LLMRateLimitError,
    LLMTimeoutError,
    error_for_status,
)


class OpenAIProvider(BaseLLMProvider):
    """OpenAI chat completions adapter.

    Example:
        >>> provider = OpenAIProvider(api_key="sk-...")
        >>> result = await provider.call("gpt-4o", messages)
    """

    family = "openai"

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout: float = 60.0,
        stream: bool = False,
        **kwargs: Any,
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            base_url: Alternative API base URL (proxies, integrations gateways)
            timeout: Client-level socket timeout in seconds
            stream: Stream the reply and collapse it to the final text
            **kwargs: Default temperature / max tokens
        """
        super().__init__(**kwargs)
        self.client = openai.AsyncOpenAI(
            api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0
        )
        self.stream = stream

    async def _complete(
        self,
        model: str,
        messages: Sequence[ChatMessage],
        temperature: float,
        max_tokens: int,
        **kwargs: Any,
    ) -> str:
        try:
            if self.stream:
                return await self._complete_streaming(model, messages, temperature, max_tokens)

            response = await self.client.chat.completions.create(
                model=model,
                messages=[m.to_dict() for m in messages],
                temperature=temperature,
                max_tokens=max_tokens,
                **kwargs,
            )

            content = response.choices[0].message.content if response.choices else None
            if not content:
                raise LLMError("OpenAI returned empty response")
            return str(content)

        except openai.AuthenticationError as e:
            raise LLMAuthenticationError(f"OpenAI authentication failed: {e}") from e
        except openai.PermissionDeniedError as e:
            raise LLMAuthenticationError(f"OpenAI permission denied: {e}") from e
        except openai.RateLimitError as e:
            raise LLMRateLimitError(f"OpenAI rate limit exceeded: {e}") from e
        except openai.APITimeoutError as e:
            raise LLMTimeoutError(f"OpenAI request timed out: {e}") from e
        except openai.APIConnectionError as e:
            raise LLMConnectionError(f"OpenAI connection failed: {e}") from e
        except (openai.BadRequestError, openai.NotFoundError, openai.UnprocessableEntityError) as e:
            raise LLMInvalidRequestError(f"OpenAI rejected request: {e}") from e
        except openai.APIStatusError as e:
            raise error_for_status(e.status_code, f"OpenAI API error {e.status_code}: {e}") from e
        except openai.APIError as e:
            raise LLMError(f"OpenAI API error: {e}") from e

    async def _complete_streaming(
        self,
        model: str,
        messages: Sequence[ChatMessage],
        temperature: float,
        max_tokens: int,
    ) -> str:
        stream = await self.client.chat.completions.create(
            model=model,
            messages=[m.to_dict() for m in messages],
            temperature=temperature,
            max_tokens=max_tokens,
            stream=True,
        )

        chunks: list[str] = []
        async for chunk in stream:
            if chunk.choices and chunk.choices[0].delta.content is not None:
                chunks.append(chunk.choices[0].delta.content)

        if not chunks:
            raise LLMError("OpenAI returned empty response")
        return "".join(chunks)
