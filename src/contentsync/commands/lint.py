"""Lint commands -- check a content graph or a schema file.

``contentsync lint URL`` reports every component below a component, page
or public URL that cannot be read. ``contentsync lint-schema FILE``
checks a schema document's conventions.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer

from contentsync.client import RestClient
from contentsync.commands.report import print_event_list, print_events, read_source
from contentsync.config import load_config, resolve_alias
from contentsync.exit_codes import EXIT_RESULT_ERRORS
from contentsync.lint import ReferenceGraphValidator, lint_schema
from contentsync.models import RequestConfig, ResultType


def lint_command(
    url: Optional[str] = typer.Argument(
        None, help="Component, page or public URL (or URL alias) to lint."
    ),
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", "-c", min=1, help="Checks started per 100ms window."
    ),
) -> None:
    """Check that every component referenced below URL can be read.

    Example::

        contentsync lint http://domain.com/_pages/index
        contentsync lint http://domain.com/2024/01/some-article
    """
    config = load_config()
    target = resolve_alias("url", url, config)
    bound = concurrency or config.concurrency

    counts = asyncio.run(_run_lint(target, bound, config.request))
    if counts[ResultType.ERROR]:
        raise typer.Exit(code=EXIT_RESULT_ERRORS)


async def _run_lint(url: Optional[str], concurrency: int, request: RequestConfig):
    async with RestClient(request) as client:
        validator = ReferenceGraphValidator(client, concurrency=concurrency)
        return await print_events(validator.lint_url(url))


def lint_schema_command(
    file: str = typer.Argument(..., help="Schema file to lint ('-' for stdin)."),
) -> None:
    """Check a schema for _description, camelCased properties and valid groups."""
    counts = print_event_list(lint_schema(read_source(file)))
    if counts[ResultType.ERROR]:
        raise typer.Exit(code=EXIT_RESULT_ERRORS)
