"""contentsync -- Import seed content into, and lint content graphs on, a remote content store.

The remote store exposes components, pages, lists and public URL aliases
through a REST-like API. This package provides the two operations that
carry real logic on top of that API:

* **import** -- flatten bootstrap (YAML) or dispatch (JSON) documents into
  one write per content URI and dispatch them with bounded concurrency,
  optionally publishing each item.
* **lint** -- walk the reference graph below a component, page or public
  URL and report every node that cannot be read; lint schema documents
  for structural conventions.

Typical workflow::

    contentsync import --yaml bootstrap.yml --url domain.com --key abc
    contentsync lint http://domain.com/_pages/index

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and alias resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting of result events.
    prefixes: URI/URL arithmetic for site prefixes.
"""

__version__ = "0.1.0"
