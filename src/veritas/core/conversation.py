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

"""Conversation history for chat sessions.

A ``ChatSession`` owns the ordered history of one conversation, frames it
with the persona system prompt and records assistant answers after each
successful turn.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from veritas.core.models import ChatMessage, Depth, OrchestrationResult, RequestOptions, Role
from veritas.llm.prompts import build_system_prompt

if TYPE_CHECKING:
    from veritas.llm.cancellation import CancellationToken
    from veritas.llm.orchestration.orchestrator import RequestOrchestrator

logger = logging.getLogger(__name__)


def apply_history_window(
    messages: Sequence[ChatMessage], window: int | None
) -> list[ChatMessage]:
    """Keep the last ``window`` non-system messages.

    Leading system messages are always kept. Order is never changed.

    Args:
        messages: Conversation, oldest first
        window: Number of non-system messages to keep (None keeps all)

    Returns:
        New list with the windowed conversation
    """
    messages = list(messages)
    if window is None:
        return messages

    head = 0
    while head < len(messages) and messages[head].role == Role.SYSTEM:
        head += 1

    system, rest = messages[:head], messages[head:]
    return system + rest[-window:] if window > 0 else system


class ChatSession:
    """Ordered history of one conversation.

    Example:
        >>> session = ChatSession(depth=Depth.DEEP)
        >>> result = await session.ask(orchestrator, "Who funded the study?")
        >>> session.history[-1].role
        <Role.ASSISTANT: 'assistant'>
    """

    def __init__(
        self,
        depth: Depth = Depth.SURFACE,
        system_prompt: str | None = None,
        history: Sequence[ChatMessage] | None = None,
    ) -> None:
        """Initialize chat session.

        Args:
            depth: Default knowledge layer for this conversation
            system_prompt: Custom persona prompt replacing the bundled template
            history: Earlier turns to resume from
        """
        self.depth = depth
        self.system_prompt = system_prompt
        self._history: list[ChatMessage] = list(history or [])

    @property
    def history(self) -> tuple[ChatMessage, ...]:
        return tuple(self._history)

    def append(self, role: Role, content: str) -> ChatMessage:
        message = ChatMessage(role=role, content=content)
        self._history.append(message)
        return message

    def clear(self) -> None:
        self._history.clear()

    def build_messages(self, depth: Depth | None = None) -> list[ChatMessage]:
        """System prompt for ``depth`` followed by the whole history."""
        system = ChatMessage(
            role=Role.SYSTEM,
            content=build_system_prompt(depth or self.depth, override=self.system_prompt),
        )
        return [system, *self._history]

    async def ask(
        self,
        orchestrator: RequestOrchestrator,
        prompt: str,
        options: RequestOptions | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> OrchestrationResult:
        """Send one user turn and record the answer.

        The user message stays in the history even when the call fails; the
        assistant message is appended only on success.
        """
        options = options or RequestOptions(depth=self.depth)
        self.append(Role.USER, prompt)

        result = await orchestrator.orchestrate(
            self.build_messages(options.depth),
            options,
            cancel_token=cancel_token,
        )

        answer = result.content_text()
        if result.success and answer is not None:
            self.append(Role.ASSISTANT, answer)
        else:
            logger.debug(f"[{result.meta.correlation_id}] No assistant turn recorded")
        return result
