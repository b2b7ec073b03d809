"""
NodeScout orchestrator - node discovery workflow.

This module coordinates the full pipeline: source fetching, recursive
decoding, extraction, deduplication against the persisted record set,
reachability probing and subscription export.
"""

from typing import List, Optional, Union

from tqdm import tqdm

from nodescout.core.config import NodeScoutConfig
from nodescout.core.dedup import merge
from nodescout.core.errors import StoreError
from nodescout.core.export import encode_subscription, filter_records, write_subscription
from nodescout.core.models import NodeRecord, NodeStatus, ScanResult, SourceConfig
from nodescout.core.scan_log import ScanLog
from nodescout.core.store import JsonFileStore, KeyValueStore, NodeRepository
from nodescout.extraction.ai_adapter import GeminiExtractor
from nodescout.extraction.strategies import ScanMode, build_chain
from nodescout.network.http_client import HTTPClientManager, SourceFetcher
from nodescout.network.probe import ReachabilityProbe
from nodescout.parsers.decoder import recursive_decode


class NodeScoutOrchestrator:
    """Main orchestrator for the node discovery workflow."""

    def __init__(
        self,
        config: NodeScoutConfig,
        store: Optional[KeyValueStore] = None,
        extractor: Optional[GeminiExtractor] = None,
        fetcher: Optional[SourceFetcher] = None,
        probe: Optional[ReachabilityProbe] = None,
        scan_log: Optional[ScanLog] = None,
    ):
        self.config = config
        self.scan_log = scan_log if scan_log is not None else ScanLog()

        # Initialize components
        self.repository = NodeRepository(store or JsonFileStore(config.get("store_file")))
        self.extractor = extractor or GeminiExtractor.from_config(config)
        self.fetcher = fetcher or SourceFetcher(
            HTTPClientManager(pool_size=config.get("fetch_workers", 8)),
            timeout=config.get("fetch_timeout", 10),
            max_workers=config.get("fetch_workers", 8),
            scan_log=self.scan_log,
        )
        self.probe_runner = probe or ReachabilityProbe(
            timeout=config.get("probe_timeout", 3.0),
            max_workers=config.get("probe_workers", 16),
        )

    def sources(self) -> SourceConfig:
        """Stored sources, falling back to the configured list."""
        stored = self.repository.load_sources()
        if stored.urls:
            return stored
        return SourceConfig(urls=list(self.config.get("sources") or []))

    def fetch_sources(self) -> str:
        """Fetch all sources and return their decoded, newline-joined text."""
        return self.fetcher.fetch_text(self.sources())

    def scan(self, text: str, mode: Union[ScanMode, str, None] = None) -> ScanResult:
        """Extract records from ``text`` and merge them into the stored set.

        Does not persist anything; see :meth:`run`.
        """
        existing = self.repository.load_nodes()
        if not text or not text.strip():
            return ScanResult(merged=existing)

        mode = ScanMode(mode or self.config.get("scan_mode", "ai"))
        self.scan_log.info("Starting parse engine...")

        content = text
        if mode == ScanMode.DEEP:
            self.scan_log.info("Applying deep recursive decoding...")
            content = recursive_decode(text)
            if content != text:
                self.scan_log.success("Base64 encoding detected and unwrapped.")

        chain = build_chain(mode, self.extractor, self.scan_log)
        found, strategy = chain.run(content, self.scan_log)

        if not found:
            self.scan_log.warning("No valid node links found.")
            return ScanResult(merged=existing)

        self.scan_log.success(f"Parse complete: captured {len(found)} node(s) via {strategy}.")
        return ScanResult(found=found, merged=merge(existing, found), strategy=strategy)

    def run(self, text: Optional[str] = None, mode: Union[ScanMode, str, None] = None) -> ScanResult:
        """Fetch (when no text is given), scan and persist the merged record set."""
        if text is None:
            text = self.fetch_sources()

        result = self.scan(text, mode)
        if result.found:
            self._save(result.merged)
            self.scan_log.info(f"Added {len(result.found)} node(s); {len(result.merged)} stored in total.")
        return result

    def probe(self, only_untested: bool = True) -> List[NodeRecord]:
        """Probe stored records and persist their new status."""
        nodes = self.repository.load_nodes()
        pending = [n for n in nodes if not only_untested or n.status == NodeStatus.UNTESTED]
        if not pending:
            self.scan_log.info("No nodes waiting for a probe.")
            return nodes

        self.scan_log.info(f"Probing {len(pending)} node(s)...")
        with tqdm(total=len(pending), desc="Probing nodes", unit="node", disable=None) as pbar:
            updated = self.probe_runner.probe_all(nodes, only_untested, progress=lambda _r: pbar.update(1))

        self._save(updated)
        self.scan_log.success("Probe complete.")
        return updated

    def export(self, path: Optional[str] = None, protocol: Optional[str] = None, country: Optional[str] = None) -> str:
        """Encode the (optionally filtered) record set; write it when ``path`` is given."""
        records = filter_records(self.repository.load_nodes(), protocol=protocol, country=country)
        if path:
            write_subscription(records, path)
        return encode_subscription(records)

    def advice(self) -> str:
        return self.extractor.generate_advice(self.repository.load_nodes())

    def delete(self, node_id: str) -> bool:
        deleted = self.repository.delete_node(node_id)
        if deleted:
            self.scan_log.info(f"Deleted node {node_id}.")
        return deleted

    def clear(self) -> bool:
        if not self.repository.clear():
            self.scan_log.error("Failed to clear nodes, the store is unreadable.")
            return False
        self.scan_log.warning("Cleared all collected nodes.")
        return True

    def _save(self, nodes: List[NodeRecord]):
        try:
            self.repository.save_nodes(nodes)
        except StoreError as e:
            self.scan_log.error(f"Failed to save nodes: {e}")

    def close(self):
        self.fetcher.http_manager.close()
