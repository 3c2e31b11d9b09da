"""Split raw import text into independent documents.

Import sources are frequently several files glued together on stdin.
Two shapes are recognised here, before any parser runs:

* ``tail -n +1 a.yml b.yml`` output, where each file is introduced by a
  ``==> name <==`` marker line. :func:`split_documents` cuts on those
  markers; the marker lines themselves are discarded.
* ``cat a.yml b.yml`` output, where nothing separates the files. For YAML
  this shows up as a top-level key (usually ``_components``) appearing a
  second time; :func:`split_yaml_documents` starts a new document there,
  and also honours explicit ``---`` separators. Concatenated JSON values
  (``{...}{...}``) are handled by the JSON decoder in
  :mod:`~contentsync.importer.parser` since they need no line scanning.

Splitting is pure text preprocessing and is shared by the YAML and JSON
code paths.
"""

from __future__ import annotations

import re

_MARKER_RE = re.compile(r"^==> .*? <==[ \t]*$", re.MULTILINE)
_DOC_SEPARATOR_RE = re.compile(r"^(---|\.\.\.)(\s|$)")
_TOP_LEVEL_KEY_RE = re.compile(
    r"""^(?P<key>"[^"]*"|'[^']*'|[^\s#'"\-?:{}\[\]][^:#]*?)\s*:(\s|$)"""
)


def split_documents(text: str) -> list[str]:
    """Split *text* on ``==> name <==`` marker lines.

    Returns:
        The non-blank documents in input order. Text without markers is
        returned as a single document, unchanged, so parse errors can
        quote it verbatim. Blank input yields an empty list.
    """
    if not _MARKER_RE.search(text):
        return [text] if text.strip() else []
    return [chunk for chunk in _MARKER_RE.split(text) if chunk.strip()]


def split_yaml_documents(text: str) -> list[str]:
    """Split naturally concatenated YAML into separate documents.

    A new document starts at an explicit ``---``/``...`` separator, or at
    a top-level key that was already seen in the current document.
    """
    documents: list[str] = []
    current: list[str] = []
    seen: set[str] = set()

    for line in text.splitlines(keepends=True):
        if _DOC_SEPARATOR_RE.match(line):
            documents.append("".join(current))
            current, seen = [], set()
            continue

        match = _TOP_LEVEL_KEY_RE.match(line)
        if match:
            key = match.group("key").strip("'\"")
            if key in seen:
                documents.append("".join(current))
                current, seen = [], set()
            seen.add(key)
        current.append(line)

    documents.append("".join(current))
    return [doc for doc in documents if doc.strip()]
