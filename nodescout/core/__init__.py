"""
Core module initialization.

This module provides access to core functionality including
configuration, models, storage, deduplication and export.
"""

from .config import NodeScoutConfig
from .models import (
    NodeRecord, NodeStatus, Protocol, Severity,
    ScanLogEntry, SourceConfig, FetchResult, ScanResult
)
from .errors import NodeScoutError, StoreError
from .dedup import dedup_batch, merge
from .export import (
    encode_subscription, decode_subscription, filter_records,
    sort_records, write_subscription
)
from .scan_log import ScanLog
from .store import KeyValueStore, MemoryStore, JsonFileStore, NodeRepository
from .utils import safe_b64decode, new_id, setup_logging

__all__ = [
    "NodeScoutConfig",
    "NodeRecord",
    "NodeStatus",
    "Protocol",
    "Severity",
    "ScanLogEntry",
    "SourceConfig",
    "FetchResult",
    "ScanResult",
    "NodeScoutError",
    "StoreError",
    "dedup_batch",
    "merge",
    "encode_subscription",
    "decode_subscription",
    "filter_records",
    "sort_records",
    "write_subscription",
    "ScanLog",
    "KeyValueStore",
    "MemoryStore",
    "JsonFileStore",
    "NodeRepository",
    "safe_b64decode",
    "new_id",
    "setup_logging"
]
