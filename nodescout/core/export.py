"""
Subscription export: filtering, ordering and Base64 encoding of node links.
"""

import base64
import logging
from typing import Iterable, List, Optional

from nodescout.core.models import NodeRecord, Protocol

logger = logging.getLogger(__name__)

SORT_FIELDS = ("latency", "country", "protocol")

# Untested and timed-out nodes sort after every measured one
_UNSET_LATENCY = 9999


def joined_links(records: Iterable[NodeRecord]) -> str:
    return "\n".join(r.raw_link for r in records if r.raw_link)


def encode_subscription(records: Iterable[NodeRecord]) -> str:
    """Base64 of the newline-joined raw links, in presentation order.

    Records without a raw link are skipped. The payload is a single
    unwrapped line, as subscription readers expect.
    """
    text = joined_links(records)
    if not text:
        return ""
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def decode_subscription(payload: str) -> str:
    """Inverse of :func:`encode_subscription`."""
    payload = "".join(payload.split())
    if not payload:
        return ""
    return base64.b64decode(payload).decode("utf-8")


def filter_records(
    records: Iterable[NodeRecord],
    protocol: Optional[str] = None,
    country: Optional[str] = None,
) -> List[NodeRecord]:
    """Keep records matching the protocol and country filters (``None``/``all`` = any)."""
    wanted_protocol = None
    if protocol and protocol != "all":
        wanted_protocol = Protocol.coerce(protocol)

    result = []
    for record in records:
        if wanted_protocol is not None and record.protocol != wanted_protocol:
            continue
        if country and country != "all" and record.country != country:
            continue
        result.append(record)
    return result


def sort_records(records: Iterable[NodeRecord], field: str = "latency", descending: bool = False) -> List[NodeRecord]:
    if field not in SORT_FIELDS:
        raise ValueError(f"Cannot sort by {field!r}; expected one of {', '.join(SORT_FIELDS)}")

    if field == "latency":
        key = lambda r: r.latency or _UNSET_LATENCY
    elif field == "country":
        key = lambda r: r.country
    else:
        key = lambda r: r.protocol.value

    return sorted(records, key=key, reverse=descending)


def write_subscription(records: Iterable[NodeRecord], path: str) -> int:
    """Write the export payload to ``path``; returns the number of links written."""
    records = list(records)
    payload = encode_subscription(records)
    with open(path, "w", encoding="ascii", newline="") as f:
        f.write(payload)
    count = sum(1 for r in records if r.raw_link)
    logger.info(f"Wrote subscription with {count} links to {path}")
    return count
