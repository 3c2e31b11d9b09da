"""Asynchronous REST client for the content store.

This module provides :class:`RestClient`, a thin wrapper around
:class:`httpx.AsyncClient` that speaks the three operations the core
needs: read a URL, write a payload to a URL, and resolve a public URL to
the page it serves.

Unlike a general purpose API client, every call returns a
:class:`~contentsync.models.RestResult` instead of raising: a failed read
or write is a value carrying the failing URL, so the import pipeline and
the lint traversal can report it as a single ``error`` event and carry on
with sibling work.

Retry with exponential backoff on 5xx and connection errors is available
but disabled by default (``RequestConfig.max_retries == 0``).
"""

from __future__ import annotations

import asyncio
import datetime
import json
import logging
from typing import Any, Optional
from urllib.parse import urlsplit

import httpx

from contentsync.models import PublicUrlTarget, RequestConfig, RestResult
from contentsync.prefixes import encode_alias, normalize_prefix

logger = logging.getLogger(__name__)


class RestClient:
    """Asynchronous client for reads and writes against the content store.

    Must be used as an async context manager. A single instance is shared
    by every in-flight operation of a run, so its connection pool is the
    only shared resource.

    Args:
        request: Timeout, SSL verification and retry settings.
        transport: Optional custom transport (``httpx.MockTransport`` in
            tests).

    Example::

        async with RestClient() as client:
            result = await client.get("http://domain.com/_components/a.json")
            if not result.ok:
                print(result.error)
    """

    def __init__(
        self,
        request: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._request = request or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> RestClient:
        self._client = httpx.AsyncClient(
            timeout=self._request.timeout,
            verify=self._request.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: object) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public operations
    # ------------------------------------------------------------------ #

    async def get(self, url: str) -> RestResult:
        """Read *url*; JSON bodies are decoded, anything else is returned as text."""
        return await self._send("GET", url)

    async def put(self, url: str, payload: Any, key: Optional[str] = None) -> RestResult:
        """Write *payload* to *url*.

        Dicts and lists are sent as JSON, with dates and datetimes written
        in ISO 8601 form. Strings (``_uris`` targets) are sent as
        ``text/plain``. The write key, when given, is sent as
        ``Authorization: Token <key>``.
        """
        headers: dict[str, str] = {}
        if key:
            headers["Authorization"] = f"Token {key}"

        if isinstance(payload, str):
            headers["Content-Type"] = "text/plain; charset=utf-8"
            return await self._send("PUT", url, headers=headers, content=payload)

        try:
            body = json.dumps(payload, default=_json_default)
        except (TypeError, ValueError) as exc:
            return RestResult(url=url, error=f"Cannot encode payload: {exc}")
        headers["Content-Type"] = "application/json"
        return await self._send("PUT", url, headers=headers, content=body)

    async def find_uri(self, url: str) -> RestResult:
        """Resolve a public URL to the page it serves.

        The public URL ``http://domain.com/blog/foo`` is looked up as the
        ``_uris`` entry keyed by ``base64("domain.com/blog/foo")``. Since
        a site may be mounted below the host root, the entry is tried under
        successively shorter site prefixes (``domain.com/blog``, then
        ``domain.com``) until one answers.

        Returns:
            A result whose ``data`` is a :class:`PublicUrlTarget`, or an
            error result carrying *url* when no prefix resolves it.
        """
        normalized = normalize_prefix(url)
        parts = urlsplit(normalized)
        scheme = parts.scheme or "http"
        segments = [seg for seg in parts.path.split("/") if seg]
        encoded = encode_alias(parts.netloc, parts.path or "/")

        sites = [
            "/".join([parts.netloc, *segments[:depth]])
            for depth in range(max(len(segments) - 1, 0), -1, -1)
        ]

        last: Optional[RestResult] = None
        for site in sites:
            result = await self.get(f"{scheme}://{site}/_uris/{encoded}")
            if result.ok and isinstance(result.data, str) and result.data.strip():
                target = PublicUrlTarget(uri=result.data.strip(), prefix=f"{scheme}://{site}")
                return RestResult(url=url, data=target, status_code=result.status_code)
            last = result

        reason = last.error if last is not None and last.error else "no matching _uris entry"
        return RestResult(url=url, error=f"Cannot resolve public URL: {reason}")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _send(self, method: str, url: str, **kwargs: Any) -> RestResult:
        """Execute one request with optional retry, converting every failure to a value.

        Retries on 5xx status codes and connection / timeout errors up to
        ``max_retries`` times. The delay doubles each attempt: 1 s, 2 s, ...
        A request that cannot be built (malformed URL) fails immediately.
        """
        assert self._client is not None, "Client not initialised -- use as async context manager"

        max_retries = self._request.max_retries

        for attempt in range(max_retries + 1):
            try:
                response = await self._client.request(method, url, **kwargs)
            except (httpx.InvalidURL, TypeError, ValueError) as exc:
                return RestResult(url=url, error=f"Invalid request: {exc}")
            except httpx.HTTPError as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    logger.debug("%s %s failed (%s), retrying in %ss", method, url, exc, delay)
                    await asyncio.sleep(delay)
                    continue
                return RestResult(url=url, error=f"Connection failed: {exc}")

            if response.status_code >= 500 and attempt < max_retries:
                delay = 2 ** attempt
                logger.debug(
                    "%s %s returned %s, retrying in %ss",
                    method, url, response.status_code, delay,
                )
                await asyncio.sleep(delay)
                continue

            return _to_result(url, response)

        return RestResult(url=url, error="Request failed after all retries")  # pragma: no cover


def _json_default(value: Any) -> str:
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _to_result(url: str, response: httpx.Response) -> RestResult:
    """Map an HTTP response to a :class:`RestResult`."""
    status = response.status_code
    if status >= 400:
        return RestResult(url=url, error=_error_message(response), status_code=status)
    return RestResult(url=url, data=extract_response_data(response), status_code=status)


def _error_message(response: httpx.Response) -> str:
    status = response.status_code
    try:
        detail = response.json()
        if isinstance(detail, dict):
            msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
        else:
            msg = str(detail)
    except ValueError:
        msg = response.text[:200] if response.text else ""

    prefix = f"HTTP {status}"
    return f"{prefix}: {msg}" if msg else prefix


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from an HTTP response.

    JSON content types are decoded; everything else (``_uris`` entries are
    plain text) is returned as text. Empty bodies yield ``None``.
    """
    if not response.content:
        return None

    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        try:
            return response.json()
        except ValueError:
            pass

    return response.text
