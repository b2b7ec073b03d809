"""
Network module initialization.

This module provides access to network operations including
HTTP client management, source fetching and reachability probing.
"""

from .http_client import HTTPClientManager, SourceFetcher
from .probe import ReachabilityProbe

__all__ = [
    "HTTPClientManager",
    "SourceFetcher",
    "ReachabilityProbe"
]
