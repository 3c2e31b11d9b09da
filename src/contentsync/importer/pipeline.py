"""Dispatch write jobs with bounded concurrency.

:class:`DispatchPipeline` drains a queue of
:class:`~contentsync.importer.publish.WriteJob` objects with a fixed pool
of ``concurrency`` workers (see :func:`contentsync.workers.drain`), so at
most ``concurrency`` writes are ever in flight. Publish follow-ups are
pushed back onto the same queue once their base write succeeds and
therefore share the same bound.

Results are yielded as :class:`~contentsync.models.ResultEvent` values in
completion order. A failed write produces one ``error`` event and never
stops the remaining jobs.
"""

from __future__ import annotations

from contextlib import aclosing
from typing import Any, AsyncIterator, Iterable, Optional, Protocol

from contentsync.exceptions import NetworkError
from contentsync.importer.publish import GENERATED_LATEST_MESSAGE, WriteJob
from contentsync.models import ResultEvent, RestResult
from contentsync.prefixes import uri_to_url
from contentsync.workers import WorkContext, drain

DEFAULT_CONCURRENCY = 10


class Writer(Protocol):
    """The slice of :class:`~contentsync.client.RestClient` the pipeline needs."""

    async def put(self, url: str, payload: Any, key: Optional[str] = None) -> RestResult: ...


class DispatchPipeline:
    """Bounded-concurrency writer for dispatch entries.

    Args:
        client: Object with an async ``put(url, payload, key)`` returning a
            :class:`~contentsync.models.RestResult`.
        prefix: Site prefix the entry URIs are written under, e.g.
            ``http://domain.com``.
        key: Write key passed to every ``put``.
        concurrency: Maximum number of writes in flight; clamped to >= 1.

    Example::

        pipeline = DispatchPipeline(client, "http://domain.com", key="abc")
        async for event in pipeline.run(jobs):
            print(event.type, event.message)
    """

    def __init__(
        self,
        client: Writer,
        prefix: str,
        key: Optional[str] = None,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        self._client = client
        self._prefix = prefix
        self._key = key
        self._concurrency = max(1, concurrency)

    async def run(self, jobs: Iterable[WriteJob]) -> AsyncIterator[ResultEvent]:
        """Write every job and yield one event per completed write.

        If the consumer stops iterating early, queued jobs are dropped and
        writes already in flight finish without being reported.
        """
        writes = drain(jobs, self._write, self._concurrency, on_error=self._write_failed)
        async with aclosing(writes) as events:
            async for event in events:
                yield event

    def _write_failed(self, job: WriteJob, exc: Exception) -> ResultEvent:
        url = uri_to_url(self._prefix, job.entry.uri)
        return NetworkError(url, details=str(exc)).to_event()

    async def _write(self, job: WriteJob, ctx: WorkContext[WriteJob]) -> None:
        url = uri_to_url(self._prefix, job.entry.uri)
        result = await self._client.put(url, job.entry.payload, self._key)

        if result.ok:
            ctx.emit(ResultEvent.success(url))
            if job.follow_up is not None:
                ctx.enqueue(job.follow_up)
        else:
            ctx.emit(NetworkError(url, details=result.error).to_event())

        if job.generated_latest:
            ctx.emit(ResultEvent.warning(GENERATED_LATEST_MESSAGE, url))
