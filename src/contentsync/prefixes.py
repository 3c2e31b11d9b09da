"""URI/URL arithmetic for site prefixes.

Content in the store is addressed three ways:

* **site-relative URIs** -- ``/_components/a/instances/b`` (dispatch keys,
  ``_ref`` values written by hand)
* **host-prefixed URIs** -- ``domain.com/_components/a`` (what the store
  itself writes into ``_ref`` values and ``_uris`` entries)
* **URLs** -- ``http://domain.com/_components/a`` (what is actually requested)

A *site prefix* is the URL of a site root, such as ``http://domain.com`` or
``https://domain.com/blog``. Helpers here convert between the three forms
and classify a URL by the namespace it points into.
"""

from __future__ import annotations

import base64
import enum
import re

_SCHEME_RE = re.compile(r"^(https?)://", re.IGNORECASE)
_NAMESPACE_RE = re.compile(r"/_(components|pages|uris|lists)(/|$)")

PUBLISHED_SUFFIX = "@published"


class ResourceKind(str, enum.Enum):
    """What a URL points at, as far as linting is concerned."""

    COMPONENT = "component"
    PAGE = "page"
    OTHER = "other"


def normalize_prefix(url: str) -> str:
    """Return *url* as a site prefix with a scheme and no trailing slash.

    ``domain.com`` becomes ``http://domain.com``; an explicit scheme is kept.
    """
    url = url.strip().rstrip("/")
    if not _SCHEME_RE.match(url):
        url = f"http://{url}"
    return url


def get_host(prefix: str) -> str:
    """Strip the scheme from a site prefix, keeping any site path.

    Example::

        get_host("http://domain.com/blog")  # "domain.com/blog"
    """
    return _SCHEME_RE.sub("", prefix).rstrip("/")


def get_scheme(url: str) -> str:
    match = _SCHEME_RE.match(url)
    return match.group(1).lower() if match else "http"


def get_from_url(url: str) -> str:
    """Return the site prefix of a component, page, list or alias URL.

    Everything before the first ``/_components``, ``/_pages``, ``/_uris`` or
    ``/_lists`` segment is the prefix. URLs without such a segment are
    returned without a trailing slash.
    """
    match = _NAMESPACE_RE.search(url)
    if match:
        return url[: match.start()]
    return url.rstrip("/")


def uri_to_url(prefix: str, uri: str) -> str:
    """Convert a site-relative or host-prefixed URI into a full URL.

    Args:
        prefix: Site prefix supplying the scheme (and host for relative URIs).
        uri: ``/_components/a`` or ``domain.com/_components/a``. Values that
            are already URLs are returned unchanged.
    """
    if _SCHEME_RE.match(uri):
        return uri
    if uri.startswith("/"):
        return f"{prefix.rstrip('/')}{uri}"
    return f"{get_scheme(prefix)}://{uri}"


def classify(url: str) -> ResourceKind:
    """Classify *url* as a component, a page, or anything else (public URL)."""
    if "/_components/" in url:
        return ResourceKind.COMPONENT
    if "/_pages/" in url:
        return ResourceKind.PAGE
    return ResourceKind.OTHER


def is_published(uri: str) -> bool:
    return uri.endswith(PUBLISHED_SUFFIX)


def strip_published(uri: str) -> str:
    """Return the "latest" URI for a ``@published`` URI (or *uri* unchanged)."""
    if is_published(uri):
        return uri[: -len(PUBLISHED_SUFFIX)]
    return uri


def add_published(uri: str) -> str:
    return uri if is_published(uri) else f"{uri}{PUBLISHED_SUFFIX}"


def encode_alias(host: str, alias: str) -> str:
    """Encode a public URL path as the key of its ``_uris`` entry.

    The key is the standard (padded) base64 of ``<host>/<alias>``, where
    *host* is the site prefix without its scheme. A leading slash on
    *alias* is dropped, so the site root ``/`` encodes ``domain.com/``.

    Example::

        encode_alias("domain.com", "foo")  # "ZG9tYWluLmNvbS9mb28="
    """
    public_uri = f"{host.rstrip('/')}/{alias.lstrip('/')}"
    return base64.b64encode(public_uri.encode("utf-8")).decode("ascii")


def to_site_relative(uri: str) -> str | None:
    """Return the site-relative form of a content URI, or ``None``.

    ``/_components/a`` is returned unchanged; ``domain.com/_components/a``
    and full URLs are cut down to their namespace path. Keys that do not
    point into a content namespace yield ``None``.
    """
    match = _NAMESPACE_RE.search(uri)
    if match is None:
        return None
    return uri[match.start():]
