"""Deadline handling for in-flight transport calls.

The controller races a deadline against the transport coroutine. On expiry
it sets the call's :class:`CancellationToken` and resolves with
:class:`RequestTimeoutError`; the transport is expected to observe the token
and abort. Whatever the transport does afterwards is discarded.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from http_pipeline.core.common.exceptions import RequestTimeoutError
from http_pipeline.core.config.app_config import DEFAULT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Timeout value that disables the deadline entirely
NO_TIMEOUT = -1


class CancellationToken:
    """Cooperative cancellation signal shared by the controller and a transport."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self.reason = reason
            self._event.set()

    async def wait(self) -> None:
        await self._event.wait()


def resolve_timeout(
    timeout_seconds: int | None, default_seconds: int = DEFAULT_TIMEOUT_SECONDS
) -> float | None:
    """Return the deadline in seconds, or None when the deadline is disabled."""
    if timeout_seconds is None:
        return float(default_seconds)
    if timeout_seconds == NO_TIMEOUT:
        return None
    if timeout_seconds <= 0:
        return float(default_seconds)
    return float(timeout_seconds)


class TimeoutController:
    """Wraps one transport call with a cancellable deadline."""

    def __init__(self, default_timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS) -> None:
        self.default_timeout_seconds = default_timeout_seconds
        self.token = CancellationToken()

    async def wrap(
        self,
        timeout_seconds: int | None,
        call: Callable[[CancellationToken], Awaitable[T]],
    ) -> T:
        deadline = resolve_timeout(timeout_seconds, self.default_timeout_seconds)
        task = asyncio.ensure_future(call(self.token))

        if deadline is None:
            return await task

        try:
            done, _ = await asyncio.wait({task}, timeout=deadline)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if task in done:
            # A result that landed before the deadline was observed wins
            return task.result()

        self.token.cancel("timeout")
        task.add_done_callback(_discard_late_outcome)
        raise RequestTimeoutError(
            f"request timed out after {deadline:g}s", timeout_seconds=deadline
        )


def _discard_late_outcome(task: asyncio.Future) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None and logger.isEnabledFor(logging.DEBUG):
        logger.debug("Discarding transport outcome after timeout: %r", exc)
