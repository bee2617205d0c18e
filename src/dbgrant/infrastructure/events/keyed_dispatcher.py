"""In-process keyed event dispatcher.

A fixed pool of worker tasks, each draining its own queue. Events are routed
by a stable hash of their key, so all events of one permission are handled in
publication order by the same worker while different permissions proceed in
parallel.
"""

import asyncio
import logging
import zlib
from collections.abc import Awaitable, Callable

from dbgrant.domain.events import DomainEvent

logger = logging.getLogger(__name__)

Handler = Callable[[DomainEvent], Awaitable[None]]


class KeyedDispatcher:
    """Implements ``EventPublisher`` on top of per-worker ``asyncio.Queue``s."""

    def __init__(self, handler: Handler, workers: int = 4) -> None:
        if workers < 1:
            raise ValueError("workers must be >= 1.")
        self._handler = handler
        self._queues: list[asyncio.Queue[DomainEvent]] = [asyncio.Queue() for _ in range(workers)]
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    def _queue_for(self, key: str) -> asyncio.Queue[DomainEvent]:
        return self._queues[zlib.crc32(key.encode()) % len(self._queues)]

    def publish(self, event: DomainEvent) -> None:
        """Enqueue without waiting. Events published before ``start`` wait in their queue."""
        self._queue_for(event.key).put_nowait(event)
        logger.debug("Queued %s for permission %s", event.kind, event.key)

    async def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._worker_loop(q, i), name=f"dbgrant-events-{i}")
            for i, q in enumerate(self._queues)
        ]
        logger.info("Started event dispatcher with %d workers", len(self._tasks))

    async def join(self) -> None:
        """Wait until every queued event has been handled."""
        await asyncio.gather(*(q.join() for q in self._queues))

    async def stop(self, drain_timeout: float | None = 10.0) -> None:
        """Drain pending events (bounded by ``drain_timeout``), then cancel workers."""
        if not self._tasks:
            return
        try:
            await asyncio.wait_for(self.join(), timeout=drain_timeout)
        except TimeoutError:
            logger.warning("Event dispatcher stopped with undelivered events")
        for t in self._tasks:
            t.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Stopped event dispatcher")

    async def _worker_loop(self, queue: asyncio.Queue[DomainEvent], worker_id: int) -> None:
        while True:
            event = await queue.get()
            try:
                await self._handler(event)
            except Exception:
                logger.exception(
                    "Worker %d failed handling %s for permission %s",
                    worker_id,
                    event.kind,
                    event.key,
                )
            finally:
                queue.task_done()
