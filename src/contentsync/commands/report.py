"""Helpers shared by the import and lint commands."""

from __future__ import annotations

import sys
from collections import Counter
from pathlib import Path
from typing import AsyncIterator, Iterable, Optional

from contentsync.exceptions import InvalidUsageError
from contentsync.models import ResultEvent, ResultType
from contentsync.output import info, print_event


async def print_events(events: AsyncIterator[ResultEvent]) -> Counter:
    """Print every event as it arrives and return counts per result type."""
    counts: Counter = Counter()
    async for event in events:
        print_event(event)
        counts[event.type] += 1
    _summarize(counts)
    return counts


def print_event_list(events: Iterable[ResultEvent]) -> Counter:
    counts: Counter = Counter()
    for event in events:
        print_event(event)
        counts[event.type] += 1
    _summarize(counts)
    return counts


def read_source(source: Optional[str]) -> str:
    """Read command input from a file path, or from stdin for ``-``/``None``.

    Raises:
        InvalidUsageError: If the file cannot be read.
    """
    if source is None or source == "-":
        return sys.stdin.read()
    path = Path(source).expanduser()
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise InvalidUsageError(f"Cannot read {source}: {exc}") from exc


def _summarize(counts: Counter) -> None:
    info(
        f"{counts[ResultType.SUCCESS]} succeeded, "
        f"{counts[ResultType.WARNING]} warnings, "
        f"{counts[ResultType.ERROR]} errors"
    )
