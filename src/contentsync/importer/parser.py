"""Parse import sources into flat dispatch entries.

Two source formats are accepted:

* **Bootstrap** (``--yaml``) -- nested seed data keyed by namespace::

      _components:
        article:
          title: Default title          # component defaults
          instances:
            foo:
              title: My Article         # /_components/article/instances/foo
      _pages:
        index:
          layout: /_components/layout/instances/main
      _uris:
        /: /_pages/index

* **Dispatch** -- a JSON object whose keys are already content URIs::

      {"/_components/article/instances/foo": {"title": "My Article"}}

Both go through :func:`parse_source`, which splits the text into
documents, parses each one, deep-merges them (later documents win on
overlapping leaves) and returns one :class:`~contentsync.models.DispatchEntry`
per URI. Syntax errors raise :class:`~contentsync.exceptions.FormatError`;
a source supplied in the wrong mode raises
:class:`~contentsync.exceptions.FormatMismatchError`.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Iterator

import yaml

from contentsync.exceptions import FormatError, FormatMismatchError
from contentsync.importer.splitter import split_documents, split_yaml_documents
from contentsync.models import DispatchEntry
from contentsync.prefixes import to_site_relative

logger = logging.getLogger(__name__)

BOOTSTRAP_NAMESPACES = ("_components", "_pages", "_lists", "_uris")
"""Top-level bootstrap keys that are flattened into dispatch entries."""

USE_YAML_HINT = "Please use the --yaml argument to import from bootstraps"
OMIT_YAML_HINT = "Please omit the --yaml argument to import dispatches"

_json_decoder = json.JSONDecoder()


def parse_source(text: str, bootstrap: bool = False) -> list[DispatchEntry]:
    """Parse raw import text into dispatch entries.

    Args:
        text: One or more concatenated bootstrap or dispatch documents,
            optionally separated by ``==> name <==`` markers.
        bootstrap: ``True`` to parse bootstrap YAML, ``False`` for dispatch
            JSON.

    Returns:
        One entry per unique URI, in first-seen order.

    Raises:
        FormatError: If any document has a syntax error, or is not a mapping.
        FormatMismatchError: If the document shape contradicts *bootstrap*.
    """
    documents = split_documents(text)
    if bootstrap:
        parsed = [
            doc
            for chunk in documents
            for part in split_yaml_documents(chunk)
            for doc in _load_yaml(part)
        ]
        merged = merge_documents(parsed)
        if any(isinstance(key, str) and key.startswith("/") for key in merged):
            raise FormatMismatchError(
                "Cannot import bootstrap from dispatch", details=OMIT_YAML_HINT
            )
        flattened = flatten_bootstrap(merged)
    else:
        parsed = [value for chunk in documents for value in _load_json(chunk)]
        merged = merge_documents(parsed)
        if any(key in BOOTSTRAP_NAMESPACES for key in merged):
            raise FormatMismatchError(
                "Cannot import dispatch from bootstrap", details=USE_YAML_HINT
            )
        flattened = _normalize_dispatch(merged)

    return [DispatchEntry(uri=uri, payload=payload) for uri, payload in flattened.items()]


def merge_documents(documents: list[Any]) -> dict[str, Any]:
    """Deep-merge parsed documents in order.

    Disjoint keys are unioned; where two documents define the same leaf,
    the later document's value wins. Empty (``None``) documents are
    skipped.

    Raises:
        FormatError: If a document is not a mapping.
    """
    merged: dict[str, Any] = {}
    for document in documents:
        if document is None:
            continue
        if not isinstance(document, dict):
            raise FormatError(
                f"Expected a mapping at the top level, got {type(document).__name__}",
                details=json.dumps(document, default=str),
            )
        merged = _deep_merge(merged, document)
    return merged


def flatten_bootstrap(data: dict[str, Any]) -> dict[str, Any]:
    """Flatten merged bootstrap data into ``{uri: payload}``.

    * ``_components.<name>`` -> ``/_components/<name>`` (only when the
      component has defaults besides ``instances``)
    * ``_components.<name>.instances.<id>`` -> ``/_components/<name>/instances/<id>``
    * ``_pages.<id>`` -> ``/_pages/<id>``
    * ``_lists.<name>`` -> ``/_lists/<name>``
    * ``_uris.<alias>`` -> ``/_uris/<alias>`` (encoded later by
      :mod:`~contentsync.importer.uris`)
    """
    entries: dict[str, Any] = {}
    for namespace, items in data.items():
        if namespace not in BOOTSTRAP_NAMESPACES:
            logger.debug("Ignoring unknown bootstrap key: %s", namespace)
            continue
        if items is None:
            continue
        if not isinstance(items, dict):
            raise FormatError(
                f"Bootstrap {namespace} must be a mapping, got {type(items).__name__}"
            )

        for name, value in items.items():
            if namespace == "_components":
                entries.update(_flatten_component(str(name), value))
            else:
                entries[f"/{namespace}/{str(name).lstrip('/')}"] = value
    return entries


def _flatten_component(name: str, data: Any) -> Iterator[tuple[str, Any]]:
    if data is None:
        return
    if not isinstance(data, dict):
        raise FormatError(f"Component {name} must be a mapping, got {type(data).__name__}")

    defaults = {key: value for key, value in data.items() if key != "instances"}
    if defaults:
        yield f"/_components/{name}", defaults

    instances = data.get("instances") or {}
    if not isinstance(instances, dict):
        raise FormatError(f"Instances of component {name} must be a mapping")
    for instance_id, instance in instances.items():
        yield f"/_components/{name}/instances/{instance_id}", instance


def _normalize_dispatch(data: dict[str, Any]) -> dict[str, Any]:
    """Reduce dispatch keys to site-relative URIs."""
    entries: dict[str, Any] = {}
    for key, payload in data.items():
        uri = to_site_relative(str(key))
        if uri is None:
            raise FormatError(f"Dispatch key is not a content URI: {key}", details=str(key))
        entries[uri] = payload
    return entries


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


# --- Document loaders ---


def _load_yaml(text: str) -> list[Any]:
    try:
        return list(yaml.safe_load_all(text))
    except yaml.YAMLError as exc:
        raise FormatError(yaml_error_message(exc), details=text) from exc


def _load_json(text: str) -> list[Any]:
    """Decode one or more concatenated JSON values from *text*."""
    values: list[Any] = []
    pos = 0
    end = len(text)
    while True:
        while pos < end and text[pos].isspace():
            pos += 1
        if pos >= end:
            return values
        try:
            value, pos = _json_decoder.raw_decode(text, pos)
        except json.JSONDecodeError as exc:
            if _is_yaml_text(text):
                raise FormatMismatchError(
                    "Cannot import dispatch from yaml", details=USE_YAML_HINT
                ) from exc
            raise FormatError(json_error_message(exc), details=text) from exc
        values.append(value)


def _is_yaml_text(text: str) -> bool:
    """True when *text* is not JSON-shaped but does parse as YAML."""
    if text.lstrip().startswith(("{", "[")):
        return False
    try:
        yaml.safe_load(text)
    except yaml.YAMLError:
        return False
    return True


def json_error_message(exc: json.JSONDecodeError) -> str:
    """Describe a JSON syntax error by its offending token and position."""
    if exc.pos >= len(exc.doc):
        return "JSON syntax error: Unexpected end of JSON input"
    return f"JSON syntax error: Unexpected token {exc.doc[exc.pos]} in JSON at position {exc.pos}"


def yaml_error_message(exc: yaml.YAMLError) -> str:
    """Describe a YAML syntax error by its problem and 1-based line/column."""
    if isinstance(exc, yaml.MarkedYAMLError) and exc.problem_mark is not None:
        mark = exc.problem_mark
        problem = exc.problem or exc.context or "invalid syntax"
        return f"YAML syntax error: {problem} at line {mark.line + 1}, column {mark.column + 1}"
    return f"YAML syntax error: {exc}"
