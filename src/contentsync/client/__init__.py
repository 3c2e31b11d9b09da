"""HTTP client module for contentsync.

Provides :class:`RestClient`, a non-blocking client backed by
:class:`httpx.AsyncClient` whose operations return
:class:`~contentsync.models.RestResult` values instead of raising.

Example::

    from contentsync.client import RestClient

    async with RestClient() as client:
        result = await client.put("http://domain.com/_components/a", {"b": "c"}, key="abc")
"""

from contentsync.client.rest import RestClient

__all__ = ["RestClient"]
