"""
Endpoint parsers for the supported proxy link formats.

These recover the connection target (host, port) and display name from
a raw link. They are used where a real endpoint is needed, such as the
reachability probe; the normalizer never stores their output.
"""

import binascii
import json
import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import unquote, urlparse

from nodescout.core.models import Protocol
from nodescout.core.utils import bytes_to_text, safe_b64decode


@dataclass
class ParsedEndpoint:
    """Connection target recovered from a raw link."""
    protocol: Protocol
    host: str
    port: int
    name: str = ""


def _valid(host: Optional[str], port: int) -> bool:
    return bool(host) and host != "0.0.0.0" and 0 < port < 65536


class VMessParser:
    """Parser for VMess links (``vmess://`` + base64 JSON)."""

    @staticmethod
    def parse(uri: str) -> Optional[ParsedEndpoint]:
        payload = uri[len("vmess://"):]
        try:
            j = json.loads(bytes_to_text(safe_b64decode(payload)))
            host = str(j.get("add") or "").strip()
            port = int(j.get("port") or 0)
        except (binascii.Error, ValueError, TypeError, AttributeError):
            return None

        if not _valid(host, port):
            return None
        return ParsedEndpoint(Protocol.VMESS, host, port, str(j.get("ps") or ""))


class URLStyleParser:
    """Parser for ``scheme://user@host:port?query#name`` links (VLESS, Trojan)."""

    def __init__(self, protocol: Protocol):
        self.protocol = protocol

    def parse(self, uri: str) -> Optional[ParsedEndpoint]:
        try:
            parsed_url = urlparse(uri)
            host = parsed_url.hostname
            port = parsed_url.port or 443
        except ValueError:
            return None

        if not parsed_url.username or not _valid(host, port):
            return None
        return ParsedEndpoint(self.protocol, host, port, unquote(parsed_url.fragment))


class ShadowsocksParser:
    """Parser for Shadowsocks links, SIP002 and legacy base64 forms."""

    @staticmethod
    def parse(uri: str) -> Optional[ParsedEndpoint]:
        body = uri.split("://", 1)[1]
        name = ""
        if "#" in body:
            body, tag = body.split("#", 1)
            name = unquote(tag)

        core = body.split("?", 1)[0].rstrip("/")
        if "@" not in core:
            # Legacy form: the whole method:password@host:port is encoded
            try:
                core = bytes_to_text(safe_b64decode(core))
            except (binascii.Error, ValueError):
                return None
            if "@" not in core:
                return None

        hostport = core.rsplit("@", 1)[1]
        if hostport.startswith("["):
            host, _, port_str = hostport[1:].partition("]:")
        else:
            host, _, port_str = hostport.rpartition(":")

        digits = re.match(r"\d+", port_str)
        if not digits:
            return None
        port = int(digits.group(0))

        if not _valid(host, port):
            return None
        return ParsedEndpoint(Protocol.SHADOWSOCKS, host, port, name)


class UniversalParser:
    """Dispatches a link to the parser for its scheme."""

    def __init__(self):
        self.parsers = {
            "vmess": VMessParser(),
            "vless": URLStyleParser(Protocol.VLESS),
            "trojan": URLStyleParser(Protocol.TROJAN),
            "ss": ShadowsocksParser(),
            "shadowsocks": ShadowsocksParser(),
        }

    def parse(self, uri: str) -> Optional[ParsedEndpoint]:
        """Parse URI using appropriate parser."""
        if not uri or "://" not in uri:
            return None

        proto = uri.split("://", 1)[0].lower()
        parser = self.parsers.get(proto)

        if parser:
            return parser.parse(uri)

        return None
