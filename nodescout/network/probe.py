"""
Reachability probe: timed TCP connect to each node's endpoint.

This only checks that something accepts connections on the target
port. No proxy handshake is attempted.
"""

import logging
import socket
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Optional, Tuple

from nodescout.core.models import NodeRecord, NodeStatus
from nodescout.parsers.uri_parser import UniversalParser

logger = logging.getLogger(__name__)

Connector = Callable[[Tuple[str, int], float], object]


class ReachabilityProbe:
    """Probes records with bounded concurrency and a per-record timeout."""

    def __init__(
        self,
        timeout: float = 3.0,
        max_workers: int = 16,
        connector: Optional[Connector] = None,
    ):
        self.timeout = timeout
        self.max_workers = max_workers
        self._connect = connector or socket.create_connection
        self._parser = UniversalParser()

    def resolve_target(self, record: NodeRecord) -> Optional[Tuple[str, int]]:
        """Endpoint to probe: the record's own, else the one parsed from its link."""
        if record.has_endpoint():
            return record.address, record.port
        parsed = self._parser.parse(record.raw_link)
        if parsed is None:
            return None
        return parsed.host, parsed.port

    def measure(self, host: str, port: int) -> Optional[int]:
        """Connect latency in ms, or ``None`` when unreachable."""
        start = time.perf_counter()
        try:
            conn = self._connect((host, port), self.timeout)
        except OSError as e:
            logger.debug(f"Probe {host}:{port} failed: {e}")
            return None
        elapsed = (time.perf_counter() - start) * 1000
        close = getattr(conn, "close", None)
        if close:
            close()
        return max(1, int(round(elapsed)))

    def probe_one(self, record: NodeRecord) -> NodeRecord:
        target = self.resolve_target(record)
        if target is None:
            return record.with_status(NodeStatus.TIMEOUT, 0)

        latency = self.measure(*target)
        if latency is None:
            return record.with_status(NodeStatus.TIMEOUT, 0)
        return record.with_status(NodeStatus.ACTIVE, latency)

    def probe_all(
        self,
        records: List[NodeRecord],
        only_untested: bool = True,
        progress: Optional[Callable[[NodeRecord], None]] = None,
    ) -> List[NodeRecord]:
        """Probe records, returning updated copies in input order."""
        indices = [
            i for i, r in enumerate(records)
            if not only_untested or r.status == NodeStatus.UNTESTED
        ]
        updated = list(records)
        if not indices:
            return updated

        workers = max(1, min(self.max_workers, len(indices)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="probe") as pool:
            for i, result in zip(indices, pool.map(self.probe_one, [records[i] for i in indices])):
                updated[i] = result
                if progress is not None:
                    progress(result)

        active = sum(1 for i in indices if updated[i].status == NodeStatus.ACTIVE)
        logger.info(f"Probed {len(indices)} node(s): {active} active, {len(indices) - active} timeout")
        return updated
