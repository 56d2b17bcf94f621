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

"""Cooperative cancellation for orchestration calls.

A caller that abandons a request (for example because the HTTP client went
away) cancels the token; in-flight provider calls and backoff sleeps stop
promptly and no further attempts are started.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from typing import TypeVar

T = TypeVar("T")


class OperationCancelledError(Exception):
    """Raised when a cancellation token fires while waiting."""


class CancellationToken:
    """One-shot cancellation signal shared by a single orchestration call.

    Example:
        >>> token = CancellationToken()
        >>> task = asyncio.create_task(orchestrator.orchestrate(messages, cancel_token=token))
        >>> token.cancel()
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        """Whether ``cancel()`` has been called."""
        return self._event.is_set()

    def cancel(self) -> None:
        """Signal cancellation. Idempotent."""
        self._event.set()

    async def sleep(self, seconds: float) -> bool:
        """Sleep up to ``seconds``.

        Returns:
            True if the token was cancelled before or during the sleep
        """
        if self.cancelled:
            return True
        if seconds <= 0:
            return False
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    async def run(self, awaitable: Awaitable[T], timeout: float | None = None) -> T:
        """Await ``awaitable`` racing it against ``timeout`` and this token.

        Raises:
            asyncio.TimeoutError: If ``timeout`` elapsed first
            OperationCancelledError: If the token fired first
        """
        if self.cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise OperationCancelledError("Operation cancelled before start")

        work = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {work, waiter}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        except BaseException:
            # The enclosing task was cancelled; the provider call must not outlive it
            work.cancel()
            await asyncio.gather(work, return_exceptions=True)
            raise
        finally:
            waiter.cancel()

        if work in done:
            return work.result()

        work.cancel()
        await asyncio.gather(work, return_exceptions=True)

        if waiter in done:
            raise OperationCancelledError("Operation cancelled")
        raise asyncio.TimeoutError(f"Operation timed out after {timeout}s")


async def run_with_timeout(
    awaitable: Awaitable[T],
    timeout: float | None,
    token: CancellationToken | None = None,
) -> T:
    """Await with a timeout, honouring ``token`` when one is given."""
    if token is None:
        return await asyncio.wait_for(awaitable, timeout=timeout)
    return await token.run(awaitable, timeout=timeout)
