"""
Core data models and structures for the NodeScout system.

This module contains the fundamental data structures used throughout
the node discovery pipeline.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


UNKNOWN_ADDRESS = "unknown"
UNKNOWN_COUNTRY = "unknown"
LOOPBACK_ADDRESS = "127.0.0.1"

# Placeholders filled in by the normalizer, never a discovered endpoint
_SENTINEL_ADDRESSES = {"", UNKNOWN_ADDRESS, LOOPBACK_ADDRESS}


class Protocol(str, Enum):
    VMESS = "vmess"
    VLESS = "vless"
    SHADOWSOCKS = "ss"
    SHADOWSOCKS_R = "ssr"
    TROJAN = "trojan"
    UNKNOWN = "unknown"

    @classmethod
    def coerce(cls, value: Any) -> "Protocol":
        """Map a free-form protocol string onto the closed enumeration."""
        if isinstance(value, Protocol):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN
        name = value.strip().lower()
        if name == "shadowsocks":
            return cls.SHADOWSOCKS
        try:
            return cls(name)
        except ValueError:
            return cls.UNKNOWN


class NodeStatus(str, Enum):
    UNTESTED = "untested"
    ACTIVE = "active"
    TIMEOUT = "timeout"


class Severity(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class NodeRecord:
    """A discovered proxy endpoint."""
    id: str
    protocol: Protocol
    name: str
    address: str
    port: int
    raw_link: str
    country: str = UNKNOWN_COUNTRY
    status: NodeStatus = NodeStatus.UNTESTED
    latency: int = 0
    uuid: Optional[str] = None

    def identity_key(self) -> Tuple[str, int, str]:
        return (self.address, self.port, self.protocol.value)

    def has_endpoint(self) -> bool:
        """True when address and port were actually populated by extraction."""
        return self.address not in _SENTINEL_ADDRESSES and self.port > 0

    def with_status(self, status: NodeStatus, latency: int = 0) -> "NodeRecord":
        return replace(self, status=status, latency=max(0, int(latency)))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the persisted (camelCase) field names."""
        data: Dict[str, Any] = {
            "id": self.id,
            "protocol": self.protocol.value,
            "name": self.name,
            "address": self.address,
            "port": self.port,
            "country": self.country,
            "status": self.status.value,
            "latency": self.latency,
            "rawLink": self.raw_link,
        }
        if self.uuid:
            data["uuid"] = self.uuid
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeRecord":
        try:
            status = NodeStatus(data.get("status", NodeStatus.UNTESTED.value))
        except ValueError:
            status = NodeStatus.UNTESTED
        return cls(
            id=str(data["id"]),
            protocol=Protocol.coerce(data.get("protocol")),
            name=str(data.get("name") or ""),
            address=str(data.get("address") or UNKNOWN_ADDRESS),
            port=int(data.get("port") or 0),
            raw_link=str(data.get("rawLink") or ""),
            country=str(data.get("country") or UNKNOWN_COUNTRY),
            status=status,
            latency=max(0, int(data.get("latency") or 0)),
            uuid=data.get("uuid"),
        )


@dataclass
class ScanLogEntry:
    """Append-only diagnostic event emitted by pipeline stages."""
    id: str
    timestamp: str
    message: str
    severity: Severity = Severity.INFO


@dataclass
class SourceConfig:
    """Ordered list of remote subscription sources."""
    urls: List[str] = field(default_factory=list)


@dataclass
class FetchResult:
    """Outcome of fetching a single source."""
    url: str
    text: str = ""
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class ScanResult:
    """Result of one extraction run."""
    found: List[NodeRecord] = field(default_factory=list)
    merged: List[NodeRecord] = field(default_factory=list)
    strategy: Optional[str] = None

    @property
    def added(self) -> int:
        return len(self.found)
