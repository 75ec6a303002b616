"""Bounded-concurrency work queue with idle detection.

The frontier runs at most ``max_concurrency`` handler invocations at a time.
Handlers may submit more work while they run, and retries may be scheduled
to arrive after a delay, so "the queue is empty" does not mean the crawl is
done. Completion is tracked with a single outstanding counter:

- ``submit`` increments it
- ``submit_after`` increments it immediately, for the whole delay window
- it is decremented once each handler invocation (or delay window) finishes

Idle is the moment the counter returns to zero. It is checked synchronously
after every completion, and the idle callbacks run exactly once.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
import inspect
import logging

from ..domain.model import WorkItem
from ..observability.context import bind_work_item


logger = logging.getLogger(__name__)

Handler = Callable[[WorkItem], Awaitable[None]]
IdleCallback = Callable[[], Awaitable[None] | None]


class Frontier:
    """FIFO work queue feeding a fixed pool of async workers."""

    def __init__(self, handler: Handler, *, max_concurrency: int):
        """Initialize frontier.

        Args:
            handler: Coroutine function invoked once per submitted WorkItem
            max_concurrency: Maximum number of concurrently running handlers
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self._handler = handler
        self.max_concurrency = max_concurrency

        self._queue: asyncio.Queue[WorkItem] = asyncio.Queue()
        self._outstanding = 0
        self._in_flight = 0
        self._delayed: set[asyncio.Task[None]] = set()

        self._idle = asyncio.Event()
        self._idle_callbacks: list[IdleCallback] = []
        self._idle_fired = False
        self._started = False

    @property
    def queue_length(self) -> int:
        """Items waiting for a worker."""
        return self._queue.qsize()

    @property
    def in_flight(self) -> int:
        """Handlers currently running."""
        return self._in_flight

    @property
    def delayed(self) -> int:
        """Submissions waiting out a delay."""
        return len(self._delayed)

    @property
    def outstanding(self) -> int:
        """Queued + running + delayed work."""
        return self._outstanding

    @property
    def is_idle(self) -> bool:
        return self._outstanding == 0

    def submit(self, item: WorkItem) -> None:
        """Add ``item`` for eventual processing. Never blocks."""
        if self._idle_fired:
            raise RuntimeError("Frontier has already gone idle; no further work is accepted")
        self._outstanding += 1
        self._queue.put_nowait(item)

    def submit_after(self, item: WorkItem, delay: float) -> None:
        """Submit ``item`` after ``delay`` seconds.

        The pending submission counts as outstanding work from now on, so
        the frontier cannot go idle while a retry waits out its delay.
        """
        if delay <= 0:
            self.submit(item)
            return
        if self._idle_fired:
            raise RuntimeError("Frontier has already gone idle; no further work is accepted")

        self._outstanding += 1
        task = asyncio.get_running_loop().create_task(self._delayed_submit(item, delay))
        self._delayed.add(task)
        task.add_done_callback(self._delayed.discard)

    def on_idle(self, callback: IdleCallback) -> None:
        """Register a callback (sync or async) to run once when all work is done."""
        self._idle_callbacks.append(callback)

    async def run(self) -> None:
        """Process work until idle, then run the idle callbacks.

        Returns immediately (after the callbacks) when nothing was submitted.
        """
        if self._started:
            raise RuntimeError("Frontier.run() can only be called once")
        self._started = True

        if self._outstanding == 0:
            self._idle.set()

        workers = [
            asyncio.create_task(self._worker(), name=f"frontier-worker-{index}")
            for index in range(self.max_concurrency)
        ]
        try:
            await self._idle.wait()
        finally:
            for task in (*workers, *self._delayed):
                task.cancel()
            await asyncio.gather(*workers, *self._delayed, return_exceptions=True)

        await self._fire_idle()

    async def _worker(self) -> None:
        while True:
            item = await self._queue.get()
            self._in_flight += 1
            try:
                with bind_work_item(item.url, item.retry_count):
                    await self._handler(item)
            except Exception:
                # One page never takes the crawl down with it
                logger.exception(f"Error processing {item.url}")
            finally:
                self._in_flight -= 1
                self._queue.task_done()
                self._task_done()

    async def _delayed_submit(self, item: WorkItem, delay: float) -> None:
        try:
            await asyncio.sleep(delay)
            # Submit before releasing the delay slot so outstanding never touches zero in between
            self.submit(item)
        finally:
            self._task_done()

    def _task_done(self) -> None:
        self._outstanding -= 1
        if self._outstanding == 0:
            self._idle.set()

    async def _fire_idle(self) -> None:
        if self._idle_fired:
            return
        self._idle_fired = True
        logger.debug(f"Frontier idle, running {len(self._idle_callbacks)} callback(s)")
        for callback in self._idle_callbacks:
            result = callback()
            if inspect.isawaitable(result):
                await result
