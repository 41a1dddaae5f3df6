"""Deadline and cancellation boundary for one orchestration.

A CallContext is created once per request and shared by every per-model task.
It becomes done either when its deadline elapses or when ``cancel()`` is
called, and from that moment every call bounded by it is abandoned with the
corresponding ProviderError.

Example:
    >>> async with deadline_scope(request.effective_timeout()) as context:
    ...     response = await orchestrator.run(context, request)
"""

import asyncio
from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager
from typing import TypeVar

from orchd.exceptions import ContextCancelledError, DeadlineExceededError, ProviderError
from orchd.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class CallContext:
    """Cancellable, time-bounded execution context shared by a fan-out.

    Must be created from inside a running event loop.
    """

    def __init__(self, timeout: float | None = None):
        """Initialize a CallContext.

        Args:
            timeout: Seconds until the deadline elapses; None means no deadline
        """
        self._loop = asyncio.get_running_loop()
        self._done = asyncio.Event()
        self._error: ProviderError | None = None
        self._timeout = timeout
        self._deadline: float | None = None
        self._timer: asyncio.TimerHandle | None = None
        if timeout is not None:
            self._deadline = self._loop.time() + timeout
            self._timer = self._loop.call_at(self._deadline, self._expire)

    @property
    def done(self) -> bool:
        return self._done.is_set()

    @property
    def error(self) -> ProviderError | None:
        """The error every bounded call fails with once the context is done."""
        return self._error

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when there is no deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - self._loop.time())

    def cancel(self) -> None:
        """Cancel the context; every bounded call is abandoned."""
        self._finish(ContextCancelledError("request cancelled"))

    def release(self) -> None:
        """Release the context's timer and cancel anything still bounded by it."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.cancel()

    def _expire(self) -> None:
        self._timer = None
        self._finish(DeadlineExceededError(f"deadline exceeded after {self._timeout:g}s"))

    def _finish(self, error: ProviderError) -> None:
        if self._error is not None:
            return
        self._error = error
        self._done.set()
        logger.debug(f"Call context done: {error}")

    async def wait(self) -> None:
        """Suspend until the context is done."""
        await self._done.wait()

    async def bound(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the context finishes first.

        When the context finishes first the awaitable is cancelled and awaited
        so its resources unwind, then the context's error is raised.

        Raises:
            DeadlineExceededError: If the deadline elapsed first
            ContextCancelledError: If the context was cancelled first
        """
        if self._error is not None:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise self._error

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._done.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            waiter.cancel()
            raise

        if task.done():
            waiter.cancel()
            return task.result()

        task.cancel()
        await asyncio.wait({task})
        if not task.cancelled() and task.exception() is not None:
            logger.debug(f"Abandoned call failed while unwinding: {task.exception()!r}")
        raise self._error


@asynccontextmanager
async def deadline_scope(timeout_seconds: float | None) -> AsyncIterator[CallContext]:
    """Derive one CallContext for a request and release it unconditionally on exit.

    Args:
        timeout_seconds: Deadline for the whole fan-out

    Yields:
        CallContext: The context to share with every per-model task
    """
    context = CallContext(timeout_seconds)
    try:
        yield context
    finally:
        context.release()
