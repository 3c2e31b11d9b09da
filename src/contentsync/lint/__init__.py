"""Lint content graphs and schemas.

Sub-modules:

* :mod:`~contentsync.lint.graph` -- recursive reachability check of the
  reference graph below a component, page or public URL.
* :mod:`~contentsync.lint.references` -- child reference extraction.
* :mod:`~contentsync.lint.ratelimit` -- fixed-window start throttle.
* :mod:`~contentsync.lint.schema` -- schema convention checks.
"""

from contentsync.lint.graph import ReferenceGraphValidator
from contentsync.lint.schema import lint_schema

__all__ = ["ReferenceGraphValidator", "lint_schema"]
