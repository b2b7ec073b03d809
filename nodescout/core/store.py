"""
Persistence boundary: key-value stores and the node repository.

The pipeline never touches a concrete storage technology; it only sees
``KeyValueStore.get``/``put``. ``NodeRepository`` owns the record set
and the source settings on top of it.
"""

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from nodescout.core.errors import StoreError
from nodescout.core.models import NodeRecord, SourceConfig
from nodescout.core.utils import dumps_json, loads_json

logger = logging.getLogger(__name__)

NODES_KEY = "nodescout_nodes"
SETTINGS_KEY = "nodescout_settings"


class KeyValueStore(ABC):
    """Opaque key -> bytes storage."""

    @abstractmethod
    def get(self, key: str) -> Optional[bytes]:
        ...

    @abstractmethod
    def put(self, key: str, value: bytes):
        ...

    @abstractmethod
    def delete(self, key: str):
        ...


class MemoryStore(KeyValueStore):
    """In-process store, mainly for tests and one-shot runs."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._data: Dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def put(self, key: str, value: bytes):
        self._data[key] = bytes(value)

    def delete(self, key: str):
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """Single JSON document mapping keys to UTF-8 text values.

    Every write rewrites the whole file through a temporary file and
    ``os.replace`` so a crash never leaves a truncated document.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StoreError(f"Cannot read store {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise StoreError(f"Store {self.path} is not a JSON object")
        return data

    def _write_all(self, data: Dict[str, str]):
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".store-", suffix=".json")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StoreError(f"Cannot write store {self.path}: {e}") from e

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            value = self._read_all().get(key)
        if value is None:
            return None
        return str(value).encode("utf-8")

    def put(self, key: str, value: bytes):
        try:
            text = value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StoreError(f"Value for {key} is not UTF-8 text") from e
        with self._lock:
            data = self._read_all()
            data[key] = text
            self._write_all(data)

    def delete(self, key: str):
        with self._lock:
            data = self._read_all()
            if key in data:
                del data[key]
                self._write_all(data)


class NodeRepository:
    """Owns the persisted record set and source settings."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def load_nodes(self) -> List[NodeRecord]:
        try:
            raw = self.store.get(NODES_KEY)
        except StoreError as e:
            logger.warning(f"Failed to read saved nodes: {e}")
            return []

        data = loads_json(raw, None)
        if raw and not isinstance(data, list):
            logger.warning("Failed to parse saved nodes, starting with an empty list")
            return []

        nodes: List[NodeRecord] = []
        for item in data or []:
            try:
                nodes.append(NodeRecord.from_dict(item))
            except (KeyError, TypeError, ValueError, AttributeError):
                logger.warning(f"Skipping malformed saved node: {item!r:.80}")
        return nodes

    def save_nodes(self, nodes: List[NodeRecord]):
        self.store.put(NODES_KEY, dumps_json([n.to_dict() for n in nodes]))

    def delete_node(self, node_id: str) -> bool:
        nodes = self.load_nodes()
        remaining = [n for n in nodes if n.id != node_id]
        if len(remaining) == len(nodes):
            return False
        try:
            self.save_nodes(remaining)
        except StoreError as e:
            logger.error(f"Failed to delete node {node_id}: {e}")
            return False
        return True

    def clear(self) -> bool:
        try:
            self.store.delete(NODES_KEY)
        except StoreError as e:
            logger.error(f"Failed to clear saved nodes: {e}")
            return False
        return True

    def _load_settings(self) -> dict:
        try:
            data = loads_json(self.store.get(SETTINGS_KEY), {})
        except StoreError as e:
            logger.warning(f"Failed to read settings: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def load_sources(self) -> SourceConfig:
        sources = self._load_settings().get("sources") or []
        return SourceConfig(urls=[str(u) for u in sources if isinstance(u, str) and u.strip()])

    def save_sources(self, config: SourceConfig) -> bool:
        settings = self._load_settings()
        settings["sources"] = list(config.urls)
        try:
            self.store.put(SETTINGS_KEY, dumps_json(settings))
        except StoreError as e:
            logger.error(f"Failed to save sources: {e}")
            return False
        return True

    def add_source(self, url: str) -> bool:
        url = url.strip()
        config = self.load_sources()
        if not url or url in config.urls:
            return False
        config.urls.append(url)
        return self.save_sources(config)

    def remove_source(self, url: str) -> bool:
        config = self.load_sources()
        if url not in config.urls:
            return False
        config.urls = [u for u in config.urls if u != url]
        return self.save_sources(config)
