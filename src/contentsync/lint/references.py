"""Extract the direct child references of a component or page.

A component references children either as a list of ``{"_ref": uri}``
objects (a component list) or as a single ``{"_ref": uri}`` property.
A page references its ``layout`` and lists the component instances of
each area as an array, whose items are plain URI strings or ``_ref``
objects.
"""

from __future__ import annotations

from typing import Any

REF_PROP = "_ref"


def list_component_references(data: Any) -> list[str]:
    """Return the URIs referenced by a component's top-level properties."""
    if not isinstance(data, dict):
        return []

    refs: list[str] = []
    for value in data.values():
        if isinstance(value, list):
            refs.extend(_list_references(value))
        elif isinstance(value, dict) and isinstance(value.get(REF_PROP), str):
            refs.append(value[REF_PROP])
    return _unique(refs)


def list_page_references(data: Any) -> list[str]:
    """Return the layout plus every URI listed in the page's areas."""
    if not isinstance(data, dict):
        return []

    refs: list[str] = []
    layout = data.get("layout")
    if isinstance(layout, str):
        refs.append(layout)
    elif isinstance(layout, dict) and isinstance(layout.get(REF_PROP), str):
        refs.append(layout[REF_PROP])

    for key, value in data.items():
        if key == "layout":
            continue
        if isinstance(value, list):
            for item in value:
                if isinstance(item, str):
                    refs.append(item)
                elif isinstance(item, dict) and isinstance(item.get(REF_PROP), str):
                    refs.append(item[REF_PROP])
        elif isinstance(value, dict) and isinstance(value.get(REF_PROP), str):
            refs.append(value[REF_PROP])
    return _unique(refs)


def _list_references(items: list[Any]) -> list[str]:
    # Only lists whose first item is a reference are component lists.
    if not items or not isinstance(items[0], dict) or REF_PROP not in items[0]:
        return []
    return [
        item[REF_PROP]
        for item in items
        if isinstance(item, dict) and isinstance(item.get(REF_PROP), str)
    ]


def _unique(refs: list[str]) -> list[str]:
    return list(dict.fromkeys(refs))
