"""Fixed-size worker pool that drains a shared work queue into result events.

Both the import pipeline and the lint traversal have the same shape: a
queue of work items, handlers that may enqueue follow-up items, and a
stream of :class:`~contentsync.models.ResultEvent` values that the caller
consumes as they are produced. :func:`drain` runs that loop with a fixed
number of worker tasks, which bounds how many handlers (and so how many
network operations) are in flight at once.

The stream ends once the queue is empty and every handler has returned.
If the consumer stops iterating early, queued items are dropped and
handlers already running finish without being reported. A handler that
raises is reported through ``on_error`` and its worker moves on to the
next item.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable, Generic, Iterable, Optional, TypeVar

from contentsync.models import ResultEvent

logger = logging.getLogger(__name__)

T = TypeVar("T")


class WorkContext(Generic[T]):
    """Handed to each handler call so it can emit events and enqueue work."""

    def __init__(
        self,
        queue: asyncio.Queue[Optional[T]],
        events: asyncio.Queue[Optional[ResultEvent]],
    ) -> None:
        self._queue = queue
        self._events = events

    def emit(self, event: ResultEvent) -> None:
        self._events.put_nowait(event)

    def enqueue(self, item: T) -> None:
        self._queue.put_nowait(item)


Handler = Callable[[T, WorkContext[T]], Awaitable[None]]
ErrorReporter = Callable[[T, Exception], ResultEvent]


def _default_error(item: object, exc: Exception) -> ResultEvent:
    return ResultEvent.error(str(exc) or type(exc).__name__, repr(item))


async def drain(
    items: Iterable[T],
    handler: Handler[T],
    workers: int,
    on_error: Optional[ErrorReporter[T]] = None,
) -> AsyncIterator[ResultEvent]:
    """Process *items* (and anything handlers enqueue) with *workers* tasks.

    Args:
        items: Initial work items.
        handler: ``async handler(item, ctx)``; reports through
            ``ctx.emit`` and schedules follow-up work through
            ``ctx.enqueue``.
        workers: Pool size; clamped to >= 1.
        on_error: Builds the event reported when *handler* raises for an
            item. Defaults to an ``error`` event carrying the exception
            text.

    Yields:
        Events in the order handlers emitted them.
    """
    queue: asyncio.Queue[Optional[T]] = asyncio.Queue()
    events: asyncio.Queue[Optional[ResultEvent]] = asyncio.Queue()
    for item in items:
        queue.put_nowait(item)
    if queue.empty():
        return

    ctx = WorkContext(queue, events)
    tasks = [
        asyncio.create_task(_worker(queue, handler, ctx, on_error or _default_error))
        for _ in range(max(1, workers))
    ]
    closer = asyncio.create_task(_close_when_drained(queue, events))
    try:
        while True:
            event = await events.get()
            if event is None:
                break
            yield event
    finally:
        closer.cancel()
        _drop_pending(queue)
        for _ in tasks:
            queue.put_nowait(None)


async def _worker(
    queue: asyncio.Queue[Optional[T]],
    handler: Handler[T],
    ctx: WorkContext[T],
    on_error: ErrorReporter[T],
) -> None:
    while True:
        item = await queue.get()
        try:
            if item is None:
                return
            await handler(item, ctx)
        except Exception as exc:
            logger.debug("Handler failed for %r", item, exc_info=True)
            ctx.emit(on_error(item, exc))
        finally:
            queue.task_done()


async def _close_when_drained(
    queue: asyncio.Queue,
    events: asyncio.Queue,
) -> None:
    await queue.join()
    events.put_nowait(None)


def _drop_pending(queue: asyncio.Queue) -> None:
    while True:
        try:
            queue.get_nowait()
        except asyncio.QueueEmpty:
            return
        queue.task_done()
