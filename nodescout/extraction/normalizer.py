"""
Candidate normalization: raw matches and AI partials to NodeRecords.
"""

import logging
import random
from typing import Any, Dict, Optional

from nodescout.core.models import (
    LOOPBACK_ADDRESS,
    UNKNOWN_ADDRESS,
    UNKNOWN_COUNTRY,
    NodeRecord,
    NodeStatus,
    Protocol,
)
from nodescout.core.utils import new_id

logger = logging.getLogger(__name__)

DEFAULT_AI_PORT = 443
IMPORTED_NAME_PREFIX = "Imported "
IMPORTED_NAME_CHARS = 15


def _placeholder_name() -> str:
    return f"Node {random.randint(0, 999)}"


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _port(value: Any) -> int:
    if isinstance(value, bool):
        return DEFAULT_AI_PORT
    try:
        port = int(value)
    except (TypeError, ValueError):
        return DEFAULT_AI_PORT
    return port if 0 < port < 65536 else DEFAULT_AI_PORT


def normalize_partial(partial: Dict[str, Any]) -> Optional[NodeRecord]:
    """Build a record from an AI-extracted partial.

    Returns ``None`` when the candidate has no raw link: it could be
    neither deduplicated nor exported.
    """
    raw_link = _text(partial.get("rawLink"))
    if not raw_link:
        logger.debug(f"Dropping candidate without rawLink: {partial!r:.120}")
        return None

    return NodeRecord(
        id=new_id(),
        protocol=Protocol.coerce(partial.get("protocol")),
        name=_text(partial.get("name")) or _placeholder_name(),
        address=_text(partial.get("address")) or LOOPBACK_ADDRESS,
        port=_port(partial.get("port")),
        raw_link=raw_link,
        country=_text(partial.get("country")) or UNKNOWN_COUNTRY,
        status=NodeStatus.UNTESTED,
        latency=0,
    )


def normalize_link(link: str) -> NodeRecord:
    """Build a record from a literal link match; the link body is not parsed."""
    return NodeRecord(
        id=new_id(),
        protocol=Protocol.coerce(link.split(":", 1)[0]),
        name=f"{IMPORTED_NAME_PREFIX}{link[:IMPORTED_NAME_CHARS]}...",
        address=UNKNOWN_ADDRESS,
        port=0,
        raw_link=link,
        country=UNKNOWN_COUNTRY,
        status=NodeStatus.UNTESTED,
        latency=0,
    )
