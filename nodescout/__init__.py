"""
NodeScout Package - Proxy Node Discovery & Normalization

Recovers a clean, deduplicated set of proxy node records from
loosely-structured text: subscription dumps, web pages and pasted
blobs, plain or hidden behind layers of Base64.
"""

__version__ = "1.0.0"
__author__ = "NodeScout Project"

from .core.config import NodeScoutConfig
from .core.models import NodeRecord, ScanLogEntry, SourceConfig
from .orchestrator import NodeScoutOrchestrator

__all__ = [
    "NodeScoutConfig",
    "NodeRecord",
    "ScanLogEntry",
    "SourceConfig",
    "NodeScoutOrchestrator"
]
