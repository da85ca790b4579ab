"""Bounded-concurrency task runner with FIFO queueing.

At most ``max_concurrency`` tasks run at once on the event loop. A task
submitted while every slot is busy waits in a FIFO queue; when a running
task finishes (successfully or not) its slot is handed directly to the
oldest waiter, so queued tasks start in submission order and none is lost.
"""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Awaitable, Callable

Task = Callable[[], Awaitable[None]]


class ConcurrencyController:
    """Run zero-argument coroutine factories with a concurrency cap.

    ``max_concurrency`` must be >= 1; validating it is the caller's job
    (the CLI rejects non-positive values before any I/O).
    """

    def __init__(self, max_concurrency: int) -> None:
        self.max_concurrency = max_concurrency
        self._running = 0
        self._waiters: deque[asyncio.Future[None]] = deque()

    @property
    def running(self) -> int:
        """Tasks started and not yet finished."""
        return self._running

    @property
    def pending(self) -> int:
        """Tasks queued behind a full set of slots."""
        return sum(1 for w in self._waiters if not w.done())

    async def add(self, task: Task) -> None:
        """Run *task* once a slot is free; return when it has finished.

        The task's own exception propagates to the caller after its slot
        has been released.
        """
        if self._running >= self.max_concurrency:
            waiter: asyncio.Future[None] = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            try:
                await waiter
            except asyncio.CancelledError:
                # Cancelled after being handed a slot: pass it on.
                if waiter.done() and not waiter.cancelled():
                    self._release()
                raise
        else:
            self._running += 1

        try:
            await task()
        finally:
            self._release()

    def _release(self) -> None:
        """Hand the slot to the oldest live waiter, or free it."""
        while self._waiters:
            waiter = self._waiters.popleft()
            if not waiter.done():
                # Slot transfers: the running count stays the same.
                waiter.set_result(None)
                return
        self._running -= 1
