"""Import command -- write bootstrap or dispatch data to a site.

Implements ``contentsync import``. Input is read from a file or stdin,
so several files can be piped in at once::

    contentsync import --yaml -u prod -k prod bootstrap.yml
    tail -n +1 bootstraps/*.yml | contentsync import --yaml -u prod -k prod
    cat export.json | contentsync import -u staging -k staging --publish
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer

from contentsync.client import RestClient
from contentsync.config import load_config, resolve_key, resolve_url
from contentsync.exit_codes import EXIT_RESULT_ERRORS
from contentsync.importer import import_content
from contentsync.models import RequestConfig, ResultType
from contentsync.commands.report import print_events, read_source
from contentsync.output import debug


def import_command(
    source: Optional[str] = typer.Argument(
        None, help="File to import. Reads stdin when omitted or '-'."
    ),
    url: Optional[str] = typer.Option(
        None, "--url", "-u", help="Site prefix or URL alias to import into."
    ),
    key: Optional[str] = typer.Option(
        None, "--key", "-k", help="Write key or key alias."
    ),
    yaml_input: bool = typer.Option(
        False, "--yaml", "-y", help="Parse input as bootstrap YAML."
    ),
    publish: bool = typer.Option(
        False, "--publish", "-p", help="Also write the @published variant of every item."
    ),
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", "-c", min=1, help="Maximum writes in flight."
    ),
) -> None:
    """Import bootstrap YAML or dispatch JSON into a site.

    Prints one result event per write. Exits with code 8 when any write
    (or the parse itself) failed.
    """
    config = load_config()
    text = read_source(source)
    site = resolve_url(url, config)
    write_key = resolve_key(key, config)
    bound = concurrency or config.concurrency

    debug(f"Importing into {site} with concurrency {bound}")
    counts = asyncio.run(
        _run_import(text, site, write_key, yaml_input, publish, bound, config.request)
    )
    if counts[ResultType.ERROR]:
        raise typer.Exit(code=EXIT_RESULT_ERRORS)


async def _run_import(
    text: str,
    site: Optional[str],
    key: Optional[str],
    bootstrap: bool,
    publish: bool,
    concurrency: int,
    request: RequestConfig,
):
    async with RestClient(request) as client:
        events = import_content(
            text,
            site,
            client,
            bootstrap=bootstrap,
            publish=publish,
            key=key,
            concurrency=concurrency,
        )
        return await print_events(events)
