"""Rewrite ``_uris`` alias entries into their on-the-wire form.

The store keys a public URL alias by the base64 of the full public URI,
so the bootstrap entry ``_uris: {/foo: /_pages/foo}`` imported into
``domain.com`` becomes a write of the text ``domain.com/_pages/foo`` to
``/_uris/ZG9tYWluLmNvbS9mb28=``.
"""

from __future__ import annotations

import base64
import binascii

from contentsync.exceptions import FormatError
from contentsync.models import DispatchEntry
from contentsync.prefixes import encode_alias

URIS_PATH = "/_uris/"


def is_alias_entry(entry: DispatchEntry) -> bool:
    return entry.uri.startswith(URIS_PATH)


def resolve_uris(entries: list[DispatchEntry], host: str) -> list[DispatchEntry]:
    """Encode every ``_uris`` entry in *entries*; other entries pass through.

    Args:
        entries: Flattened dispatch entries.
        host: Site prefix without its scheme, e.g. ``domain.com``.

    Raises:
        FormatError: If an alias target is not a string.
    """
    return [resolve_uri_entry(entry, host) if is_alias_entry(entry) else entry for entry in entries]


def resolve_uri_entry(entry: DispatchEntry, host: str) -> DispatchEntry:
    alias = entry.uri[len(URIS_PATH):]
    target = entry.payload
    if not isinstance(target, str):
        raise FormatError(
            f"Alias {entry.uri} must map to a page URI string",
            details=str(target),
        )

    if target.startswith("/"):
        target = f"{host.rstrip('/')}{target}"

    if _is_encoded(alias, host):
        return DispatchEntry(uri=entry.uri, payload=target)
    return DispatchEntry(uri=f"{URIS_PATH}{encode_alias(host, alias)}", payload=target)


def _is_encoded(alias: str, host: str) -> bool:
    """True when *alias* is already the base64 key of a URI on *host*.

    Dispatch exported from a store carries encoded keys; those must not
    be encoded a second time.
    """
    if not alias or len(alias) % 4:
        return False
    try:
        decoded = base64.b64decode(alias, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return False
    return decoded.startswith(f"{host.rstrip('/')}/")
