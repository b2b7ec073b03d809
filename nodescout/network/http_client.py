"""
Network operations and HTTP client management.

This module handles HTTP sessions and concurrent fetching of
subscription sources.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter

from nodescout.core.models import FetchResult, SourceConfig
from nodescout.core.scan_log import ScanLog
from nodescout.core.utils import random_user_agent
from nodescout.parsers.decoder import recursive_decode

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10
DEFAULT_WORKERS = 8


class HTTPClientManager:
    """Manages a pooled HTTP session shared by all fetch threads."""

    def __init__(self, pool_size: int = 10):
        self._session: Optional[requests.Session] = None
        self._pool_size = pool_size

    def _create_session(self) -> requests.Session:
        """Create a requests session with connection pooling and no retries."""
        session = requests.Session()
        adapter = HTTPAdapter(
            pool_connections=self._pool_size,
            pool_maxsize=self._pool_size,
            max_retries=0,
        )
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session

    def get_session(self) -> requests.Session:
        if self._session is None:
            self._session = self._create_session()
        return self._session

    def close(self):
        if self._session is not None:
            self._session.close()
            self._session = None


class SourceFetcher:
    """Fetches all configured sources concurrently, each independently fallible."""

    def __init__(
        self,
        http_manager: Optional[HTTPClientManager] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_workers: int = DEFAULT_WORKERS,
        scan_log: Optional[ScanLog] = None,
    ):
        self.http_manager = http_manager or HTTPClientManager(pool_size=max_workers)
        self.timeout = timeout
        self.max_workers = max_workers
        self.scan_log = scan_log if scan_log is not None else ScanLog()

    def _fetch_single_url(self, url: str) -> FetchResult:
        self.scan_log.info(f"GET {url}")
        session = self.http_manager.get_session()
        headers = {"User-Agent": random_user_agent()}
        try:
            resp = session.get(url, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            return FetchResult(url=url, error=f"{type(e).__name__}: {e}")

        if resp.status_code != 200:
            return FetchResult(url=url, error=f"HTTP {resp.status_code}")
        return FetchResult(url=url, text=resp.text or "")

    def fetch_all(self, config: SourceConfig) -> Dict[str, FetchResult]:
        """Fetch every URL concurrently; the result map keeps configuration order."""
        urls: List[str] = list(dict.fromkeys(u for u in config.urls if u))
        if not urls:
            return {}

        results: Dict[str, FetchResult] = {}
        workers = max(1, min(self.max_workers, len(urls)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fetch") as pool:
            futures = {pool.submit(self._fetch_single_url, url): url for url in urls}
            for future in as_completed(futures):
                url = futures[future]
                try:
                    result = future.result()
                except Exception as e:
                    logger.exception(f"Unexpected error fetching {url}")
                    result = FetchResult(url=url, error=str(e))
                if not result.ok:
                    self.scan_log.warning(f"Failed [{url}]: {result.error}")
                results[url] = result

        return {url: results[url] for url in urls}

    def fetch_text(self, config: SourceConfig) -> str:
        """Fetch, decode each body individually, and newline-join in source order."""
        if not config.urls:
            self.scan_log.warning("No subscription sources configured.")
            return ""

        self.scan_log.info(f"Fetching {len(config.urls)} configured source(s)...")
        results = self.fetch_all(config)
        bodies = [recursive_decode(r.text) for r in results.values() if r.ok and r.text]
        combined = "\n".join(bodies)

        if not combined.strip():
            self.scan_log.warning("Fetched content is empty or was blocked.")
            return ""
        self.scan_log.success(f"Fetched {len(combined)} characters, ready to parse.")
        return combined
