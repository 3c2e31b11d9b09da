"""Lint component schema documents for structural conventions.

A schema is a YAML mapping whose root properties describe the fields of a
component. :func:`lint_schema` checks that:

* the YAML parses,
* a ``_description`` root key is present,
* every root property is camelCased (a single leading underscore is
  allowed for reserved keys such as ``_version`` and ``_groups``),
* every field listed by ``_groups.<group>.fields`` is a root property.
"""

from __future__ import annotations

import re
from collections.abc import Hashable
from typing import Any

import yaml

from contentsync.exceptions import ValidationError
from contentsync.models import ResultEvent

_WORD_RE = re.compile(r"[^\W_]+")


def lint_schema(text: str) -> list[ResultEvent]:
    """Lint one schema document.

    Returns:
        A single ``error`` event on a syntax error; otherwise one ``error``
        event per failed check, or a single ``success`` event when every
        check passes.
    """
    try:
        schema = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        return [ResultEvent.error(f"YAML syntax error: {_first_clause(str(exc))}")]

    if not isinstance(schema, dict):
        schema = {}

    errors: list[ValidationError] = []

    if "_description" not in schema:
        errors.append(ValidationError("Schema has no _description"))

    bad_names = non_camel_cased_props(schema)
    if bad_names:
        errors.append(
            ValidationError("Properties must be camelCased", details="\n".join(bad_names))
        )

    missing = nonexistent_group_fields(schema)
    if missing:
        errors.append(
            ValidationError(
                "Fields referenced by groups don't exist", details="\n".join(missing)
            )
        )

    if errors:
        return [err.to_event() for err in errors]
    return [ResultEvent.success()]


def is_camel_cased(name: str) -> bool:
    """Check camelCase loosely, ignoring letter case.

    ``imageURL`` and ``café`` pass; only separators and other symbols
    fail, since the point is that every property can be used in dot
    notation.
    """
    folded = "".join(_WORD_RE.findall(name)).lower()
    lowered = name.lower()
    return lowered == folded or lowered == f"_{folded}"


def non_camel_cased_props(schema: dict[Any, Any]) -> list[str]:
    return [str(key) for key in schema if not is_camel_cased(str(key))]


def nonexistent_group_fields(schema: dict[Any, Any]) -> list[str]:
    """Return ``<group> » <field>`` for every group field missing from the root."""
    groups = schema.get("_groups")
    if not isinstance(groups, dict):
        return []

    missing: list[str] = []
    for group_name, group in groups.items():
        fields = group.get("fields") if isinstance(group, dict) else None
        if isinstance(fields, str):
            fields = [fields]
        for field in fields or []:
            if not isinstance(field, Hashable) or field not in schema:
                missing.append(f"{group_name} » {field}")
    return missing


def _first_clause(message: str) -> str:
    """Cut a parser message down to the part before its first colon."""
    index = message.find(":")
    if index != -1:
        message = message[:index]
    return " ".join(message.split())
