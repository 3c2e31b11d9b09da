"""The import operation: parse, resolve aliases, expand publishes, dispatch.

:func:`import_content` is the single entry point used by the CLI. Parse
and configuration failures are reported as one ``error`` event before any
write is issued; per-write failures are reported by the pipeline and do
not stop the run.
"""

from __future__ import annotations

from contextlib import aclosing
from typing import AsyncIterator, Optional

from contentsync.exceptions import ConfigError, ContentSyncError
from contentsync.importer.parser import parse_source
from contentsync.importer.pipeline import DEFAULT_CONCURRENCY, DispatchPipeline, Writer
from contentsync.importer.publish import expand_publish
from contentsync.importer.uris import resolve_uris
from contentsync.models import ResultEvent
from contentsync.prefixes import get_host, normalize_prefix

NO_URL_MESSAGE = "URL is not defined! Please specify a site prefix to import to"


async def import_content(
    source: str,
    url: Optional[str],
    client: Writer,
    *,
    bootstrap: bool = False,
    publish: bool = False,
    key: Optional[str] = None,
    concurrency: int = DEFAULT_CONCURRENCY,
) -> AsyncIterator[ResultEvent]:
    """Import *source* into the site at *url*, yielding one event per outcome.

    Args:
        source: Raw bootstrap YAML or dispatch JSON text.
        url: Site prefix (``domain.com`` or ``https://domain.com/blog``),
            already resolved from any alias.
        client: Writer used for every ``put``.
        bootstrap: Parse *source* as bootstrap YAML.
        publish: Also write the ``@published`` variant of every item.
        key: Write key.
        concurrency: Maximum number of writes in flight.

    Example::

        async with RestClient() as client:
            async for event in import_content(text, "domain.com", client, bootstrap=True):
                print(event.to_dict())
    """
    if not url:
        yield ConfigError(NO_URL_MESSAGE).to_event()
        return

    prefix = normalize_prefix(url)
    try:
        entries = parse_source(source, bootstrap=bootstrap)
        entries = resolve_uris(entries, get_host(prefix))
    except ContentSyncError as exc:
        yield exc.to_event()
        return

    jobs = expand_publish(entries, publish)
    pipeline = DispatchPipeline(client, prefix, key=key, concurrency=concurrency)
    async with aclosing(pipeline.run(jobs)) as events:
        async for event in events:
            yield event
