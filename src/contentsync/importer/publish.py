"""Derive the extra writes needed to publish imported items.

With ``--publish`` every imported item is written twice: once to its
"latest" URI and, after that write succeeds, once more to the
``@published`` variant of the same URI.

A source may also key an item by its ``@published`` URI directly. The
store cannot hold a published version without a latest one, so the
latest entry is synthesized from the same payload and written first; the
``@published`` write follows, and a warning reports that latest data was
generated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from contentsync.importer.uris import is_alias_entry
from contentsync.models import DispatchEntry
from contentsync.prefixes import add_published, is_published, strip_published

GENERATED_LATEST_MESSAGE = "Generated latest data for @published item"


@dataclass(frozen=True)
class WriteJob:
    """One write for the dispatch pipeline.

    Attributes:
        entry: The URI and payload to write.
        follow_up: Write to enqueue once *entry* was written successfully.
        generated_latest: Emit :data:`GENERATED_LATEST_MESSAGE` after this
            write, because its latest counterpart was synthesized.
    """

    entry: DispatchEntry
    follow_up: Optional[WriteJob] = None
    generated_latest: bool = False


def expand_publish(entries: list[DispatchEntry], publish: bool) -> list[WriteJob]:
    """Turn flattened entries into write jobs, adding publish follow-ups.

    Without *publish*, each entry is written exactly as keyed. With it:

    * ``uri`` -> write ``uri``, then ``uri@published``
    * ``uri@published`` -> write ``uri`` (synthesized), then
      ``uri@published`` with a warning
    * ``uri@published`` alongside an explicit ``uri`` -> the explicit
      published payload replaces the follow-up of ``uri``; nothing is
      synthesized
    * ``_uris`` entries are never published
    """
    if not publish:
        return [WriteJob(entry) for entry in entries]

    explicit_published = {
        strip_published(entry.uri): entry for entry in entries if is_published(entry.uri)
    }
    latest_uris = {entry.uri for entry in entries if not is_published(entry.uri)}

    jobs: list[WriteJob] = []
    for entry in entries:
        if is_alias_entry(entry):
            jobs.append(WriteJob(entry))
        elif is_published(entry.uri):
            latest_uri = strip_published(entry.uri)
            if latest_uri in latest_uris:
                continue
            latest = DispatchEntry(uri=latest_uri, payload=entry.payload)
            jobs.append(WriteJob(latest, follow_up=WriteJob(entry, generated_latest=True)))
        else:
            published = explicit_published.get(entry.uri) or DispatchEntry(
                uri=add_published(entry.uri), payload=entry.payload
            )
            jobs.append(WriteJob(entry, follow_up=WriteJob(published)))
    return jobs
