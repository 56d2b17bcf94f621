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

"""Anthropic (Claude) provider adapter.

Uses the official Anthropic Python SDK. Claude takes the system prompt as a
separate parameter, so leading system messages are lifted out of the
conversation before the request is sent.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import anthropic

from veritas.core.models import ChatMessage, Role

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


def split_system_prompt(messages: Sequence[ChatMessage]) -> tuple[str | None, list[dict[str, str]]]:
    """Separate system messages from the chat turns.

    Returns:
        Joined system text (None when there is none) and the remaining turns
        in their original order
    """
    system_parts = [m.content for m in messages if m.role == Role.SYSTEM]
    turns = [m.to_dict() for m in messages if m.role != Role.SYSTEM]
    return ("\n\n".join(system_parts) if system_parts else None), turns


class AnthropicProvider(BaseLLMProvider):
    """Anthropic Claude adapter.

    Example:
        >>> provider = AnthropicProvider(api_key="sk-ant-...")
        >>> result = await provider.call("claude-3-5-sonnet-20241022", messages)
    """

    family = "anthropic"

    def __init__(self, api_key: str, timeout: float = 60.0, **kwargs: Any):
        """Initialize Anthropic provider.

        Args:
            api_key: Anthropic API key
            timeout: Client-level socket timeout in seconds
            **kwargs: Default temperature / max tokens
        """
        super().__init__(**kwargs)
        self.client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)

    async def _complete(
        self,
        model: str,
        messages: Sequence[ChatMessage],
        temperature: float,
        max_tokens: int,
        **kwargs: Any,
    ) -> str:
        system, turns = split_system_prompt(messages)
        if system is not None:
            kwargs["system"] = system

        try:
            response = await self.client.messages.create(
                model=model,
                max_tokens=max_tokens,
                # Claude accepts 0.0-1.0
                temperature=min(temperature, 1.0),
                messages=turns,
                **kwargs,
            )

            if not response.content:
                raise LLMError("Anthropic returned empty response")

            text = "".join(
                block.text for block in response.content if getattr(block, "type", None) == "text"
            )
            if not text:
                raise LLMError(f"Unexpected content type: {type(response.content[0])}")
            return text

        except anthropic.AuthenticationError as e:
            raise LLMAuthenticationError(f"Anthropic authentication failed: {e}") from e
        except anthropic.PermissionDeniedError as e:
            raise LLMAuthenticationError(f"Anthropic permission denied: {e}") from e
        except anthropic.RateLimitError as e:
            raise LLMRateLimitError(f"Anthropic rate limit exceeded: {e}") from e
        except anthropic.APITimeoutError as e:
            raise LLMTimeoutError(f"Anthropic request timed out: {e}") from e
        except anthropic.APIConnectionError as e:
            raise LLMConnectionError(f"Anthropic connection failed: {e}") from e
        except (
            anthropic.BadRequestError,
            anthropic.NotFoundError,
            anthropic.UnprocessableEntityError,
        ) as e:
            raise LLMInvalidRequestError(f"Anthropic rejected request: {e}") from e
        except anthropic.APIStatusError as e:
            raise error_for_status(e.status_code, f"Anthropic API error {e.status_code}: {e}") from e
        except anthropic.APIError as e:
            raise LLMError(f"Anthropic API error: {e}") from e
