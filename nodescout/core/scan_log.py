"""
Scan log: append-only diagnostic events for observers (console, UI).

Every entry is mirrored to the standard logging module so the
pipeline leaves a trail even when no observer is attached.
"""

import logging
import threading
from typing import Callable, List

from nodescout.core.models import ScanLogEntry, Severity
from nodescout.core.utils import new_id, now_label

logger = logging.getLogger(__name__)

_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}

Observer = Callable[[ScanLogEntry], None]


class ScanLog:
    """Newest-first list of scan events with observer callbacks."""

    def __init__(self, max_entries: int = 500):
        self.max_entries = max_entries
        self._entries: List[ScanLogEntry] = []
        self._observers: List[Observer] = []
        self._lock = threading.Lock()

    def add(self, message: str, severity: Severity = Severity.INFO) -> ScanLogEntry:
        entry = ScanLogEntry(id=new_id(), timestamp=now_label(), message=message, severity=severity)
        with self._lock:
            self._entries.insert(0, entry)
            del self._entries[self.max_entries:]
            observers = list(self._observers)

        logger.log(_LEVELS[severity], message)
        for observer in observers:
            try:
                observer(entry)
            except Exception as e:
                logger.debug(f"Scan log observer failed: {e}")
        return entry

    def info(self, message: str) -> ScanLogEntry:
        return self.add(message, Severity.INFO)

    def success(self, message: str) -> ScanLogEntry:
        return self.add(message, Severity.SUCCESS)

    def warning(self, message: str) -> ScanLogEntry:
        return self.add(message, Severity.WARNING)

    def error(self, message: str) -> ScanLogEntry:
        return self.add(message, Severity.ERROR)

    def subscribe(self, observer: Observer):
        with self._lock:
            self._observers.append(observer)

    @property
    def entries(self) -> List[ScanLogEntry]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
