"""
Deduplication of node record sets.

Two records are the same node when their raw links are identical, or
when both carry a real endpoint and share (address, port, protocol).
The triple is only trusted when extraction actually populated it:
regex-path records all carry ``unknown:0`` and AI partials without an
address carry the loopback placeholder, and either would otherwise
collapse into one.
"""

from typing import Iterable, List, Set, Tuple

from nodescout.core.models import NodeRecord


def dedup_batch(records: Iterable[NodeRecord]) -> List[NodeRecord]:
    """Stable first-wins filter over a single ordered batch."""
    seen_links: Set[str] = set()
    seen_triples: Set[Tuple[str, int, str]] = set()
    unique: List[NodeRecord] = []

    for record in records:
        link = record.raw_link
        triple = record.identity_key() if record.has_endpoint() else None

        if link and link in seen_links:
            continue
        if triple is not None and triple in seen_triples:
            continue

        if link:
            seen_links.add(link)
        if triple is not None:
            seen_triples.add(triple)
        unique.append(record)

    return unique


def merge(existing: Iterable[NodeRecord], incoming: Iterable[NodeRecord]) -> List[NodeRecord]:
    """Merge a new batch into an existing record set.

    Incoming records are placed ahead of existing ones, so a freshly
    scanned copy of a known node replaces the stale record and newer
    runs sort first.
    """
    return dedup_batch([*incoming, *existing])
