"""Validate that every node below a component, page or public URL is readable.

:class:`ReferenceGraphValidator` walks the reference graph starting from
one URL:

1. **Quick check** -- read the composed ``<url>.json``. The store only
   composes a node when every node it transitively references resolves,
   so success here proves the whole subtree and nothing below is read.
2. **Deep check** -- if composing failed, read the raw ``<url>``. A
   failure is reported as one ``error`` event for that node; on success
   the node is reported and each direct child reference is queued for
   its own check.

Checks are run by a fixed pool of ``concurrency`` workers draining a
shared queue, and a :class:`~contentsync.lint.ratelimit.FixedWindowThrottle`
lets at most ``concurrency`` checks start per 100 ms window however deep
the graph fans out. Every URL is checked at most once per run, so cyclic
references terminate.
"""

from __future__ import annotations

from contextlib import aclosing
from dataclasses import dataclass
from typing import AsyncIterator, Optional, Protocol

from contentsync.exceptions import ConfigError, NetworkError
from contentsync.lint.ratelimit import FixedWindowThrottle
from contentsync.lint.references import list_component_references, list_page_references
from contentsync.models import ResultEvent, RestResult
from contentsync.prefixes import ResourceKind, classify, get_from_url, uri_to_url
from contentsync.workers import WorkContext, drain

DEFAULT_CONCURRENCY = 10
RATE_WINDOW = 0.1
NO_URL_MESSAGE = "URL is not defined! Please specify a url to lint"


class Reader(Protocol):
    """The slice of :class:`~contentsync.client.RestClient` the validator needs."""

    async def get(self, url: str) -> RestResult: ...

    async def find_uri(self, url: str) -> RestResult: ...


@dataclass(frozen=True)
class _Check:
    url: str
    prefix: str
    kind: ResourceKind


class ReferenceGraphValidator:
    """Recursive, rate-limited reachability check of a content graph.

    Args:
        client: Reader used for every ``get`` and ``find_uri``.
        concurrency: Number of workers, and checks started per window.
        window: Throttle window in seconds.
        throttle: Optional pre-built throttle (tests inject a fake clock).

    Example::

        validator = ReferenceGraphValidator(client, concurrency=5)
        async for event in validator.lint_url("http://domain.com/_pages/index"):
            print(event.type, event.message)
    """

    def __init__(
        self,
        client: Reader,
        concurrency: int = DEFAULT_CONCURRENCY,
        window: float = RATE_WINDOW,
        throttle: Optional[FixedWindowThrottle] = None,
    ) -> None:
        self._client = client
        self._concurrency = max(1, concurrency)
        self._throttle = throttle or FixedWindowThrottle(self._concurrency, window)

    async def lint_url(self, url: Optional[str]) -> AsyncIterator[ResultEvent]:
        """Classify *url* and validate everything reachable from it.

        Components and pages are checked directly. Anything else is taken
        to be a public URL: it is resolved to its page first, reported,
        and the page is then checked.
        """
        if not url:
            yield ConfigError(NO_URL_MESSAGE).to_event()
            return

        kind = classify(url)
        if kind is ResourceKind.OTHER:
            resolved = await self._client.find_uri(url)
            if not resolved.ok:
                yield NetworkError(url, details=resolved.error).to_event()
                return
            target = resolved.data
            yield ResultEvent.success(url)
            root = _Check(uri_to_url(target.prefix, target.uri), target.prefix, ResourceKind.PAGE)
        else:
            root = _Check(url, get_from_url(url), kind)

        async with aclosing(self._walk(root)) as events:
            async for event in events:
                yield event

    async def check_component(self, url: str, prefix: str) -> AsyncIterator[ResultEvent]:
        async with aclosing(self._walk(_Check(url, prefix, ResourceKind.COMPONENT))) as events:
            async for event in events:
                yield event

    async def check_page(self, url: str, prefix: str) -> AsyncIterator[ResultEvent]:
        async with aclosing(self._walk(_Check(url, prefix, ResourceKind.PAGE))) as events:
            async for event in events:
                yield event

    # ------------------------------------------------------------------ #
    # Traversal
    # ------------------------------------------------------------------ #

    async def _walk(self, root: _Check) -> AsyncIterator[ResultEvent]:
        visited = {_canonical(root.url)}

        async def handle(check: _Check, ctx: WorkContext[_Check]) -> None:
            await self._throttle.acquire()
            for child in await self._check(check, ctx):
                key = _canonical(child.url)
                if key not in visited:
                    visited.add(key)
                    ctx.enqueue(child)

        def failed(check: _Check, exc: Exception) -> ResultEvent:
            return NetworkError(check.url, details=str(exc)).to_event()

        checks = drain([root], handle, self._concurrency, on_error=failed)
        async with aclosing(checks) as events:
            async for event in events:
                yield event

    async def _check(self, check: _Check, ctx: WorkContext[_Check]) -> list[_Check]:
        """Check one node, report it, and return its direct children."""
        quick = await self._client.get(f"{check.url}.json")
        if quick.ok:
            ctx.emit(ResultEvent.success(check.url))
            return []

        raw = await self._client.get(check.url)
        if not raw.ok:
            ctx.emit(NetworkError(check.url, details=raw.error).to_event())
            return []

        ctx.emit(ResultEvent.success(check.url))
        if check.kind is ResourceKind.PAGE:
            refs = list_page_references(raw.data)
        else:
            refs = list_component_references(raw.data)
        return [
            _Check(uri_to_url(check.prefix, ref), check.prefix, ResourceKind.COMPONENT)
            for ref in refs
        ]


def _canonical(url: str) -> str:
    return url.rstrip("/")
