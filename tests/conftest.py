"""Shared test fixtures for contentsync.

Provides an in-memory content store standing in for
:class:`~contentsync.client.RestClient`, isolated config environments,
output state management, and a CLI runner. These fixtures are
automatically discovered by pytest and available to all test modules
without explicit imports.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Optional

import pytest

from contentsync.models import PublicUrlTarget, RestResult
from contentsync.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale
    ("I/O operation on closed file").  Resetting forces a fresh manager
    to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# In-memory content store
# ---------------------------------------------------------------------------


class FakeStore:
    """Async stand-in for RestClient backed by plain dicts.

    Attributes:
        data: ``url -> body`` served by :meth:`get`. Missing URLs are 404s.
        uris: ``public url -> PublicUrlTarget`` served by :meth:`find_uri`.
        fail_writes: URLs whose ``put`` fails with a 500.
        writes: ``(url, payload, key)`` for every ``put``, in call order.
        reads: Every URL passed to :meth:`get`, in call order.
        max_in_flight: Highest number of overlapping calls observed.
    """

    def __init__(self, delay: float = 0) -> None:
        self.data: dict[str, Any] = {}
        self.uris: dict[str, PublicUrlTarget] = {}
        self.fail_writes: set[str] = set()
        self.writes: list[tuple[str, Any, Optional[str]]] = []
        self.reads: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._delay = delay

    async def _enter(self) -> None:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(self._delay)

    async def get(self, url: str) -> RestResult:
        self.reads.append(url)
        await self._enter()
        try:
            if url in self.data:
                return RestResult(url=url, data=self.data[url], status_code=200)
            return RestResult(url=url, error="HTTP 404: Not Found", status_code=404)
        finally:
            self.in_flight -= 1

    async def put(self, url: str, payload: Any, key: Optional[str] = None) -> RestResult:
        self.writes.append((url, payload, key))
        await self._enter()
        try:
            if url in self.fail_writes:
                return RestResult(url=url, error="HTTP 500: boom", status_code=500)
            return RestResult(url=url, data={}, status_code=200)
        finally:
            self.in_flight -= 1

    async def find_uri(self, url: str) -> RestResult:
        self.reads.append(url)
        if url in self.uris:
            return RestResult(url=url, data=self.uris[url])
        return RestResult(url=url, error="Cannot resolve public URL: HTTP 404: Not Found")

    @property
    def written_urls(self) -> list[str]:
        return [url for url, _, _ in self.writes]


@pytest.fixture
def store() -> FakeStore:
    """An empty in-memory store with no artificial latency."""
    return FakeStore()


@pytest.fixture
def slow_store() -> FakeStore:
    """An in-memory store whose calls take a few milliseconds, so they overlap."""
    return FakeStore(delay=0.005)


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Sets XDG_CONFIG_HOME and XDG_DATA_HOME to subdirectories of tmp_path
    so that tests never touch real user config, and clears the
    CONTENTSYNC_* environment variables.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("contentsync.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["CONTENTSYNC_URL", "CONTENTSYNC_KEY"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Set up a quiet output manager for tests that don't care about output."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def json_output() -> OutputManager:
    """Set up JSON output for tests that check JSON-formatted output."""
    output = OutputManager(format=OutputFormat.JSON)
    set_output(output)
    yield output
    reset_output()


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
