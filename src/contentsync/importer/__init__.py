"""Import bootstrap or dispatch documents into a content store.

Typical usage::

    from contentsync.client import RestClient
    from contentsync.importer import import_content

    async with RestClient() as client:
        async for event in import_content(text, "domain.com", client, bootstrap=True, key="abc"):
            ...

Sub-modules:

* :mod:`~contentsync.importer.splitter` -- split concatenated input into documents.
* :mod:`~contentsync.importer.parser` -- parse and flatten documents into entries.
* :mod:`~contentsync.importer.uris` -- encode ``_uris`` alias entries.
* :mod:`~contentsync.importer.publish` -- derive ``@published`` writes.
* :mod:`~contentsync.importer.pipeline` -- bounded-concurrency dispatch.
* :mod:`~contentsync.importer.runner` -- the end-to-end import operation.
"""

from contentsync.importer.parser import parse_source
from contentsync.importer.pipeline import DispatchPipeline
from contentsync.importer.runner import import_content

__all__ = ["parse_source", "DispatchPipeline", "import_content"]
