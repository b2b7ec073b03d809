"""
Tests for endpoint parsing of raw links.
"""

import base64
import json

from nodescout.core.models import Protocol
from nodescout.parsers.uri_parser import UniversalParser


def b64(text: str) -> str:
    return base64.b64encode(text.encode()).decode()


class TestUniversalParser:

    def setup_method(self):
        self.parser = UniversalParser()

    def test_vmess(self):
        payload = {"add": "1.2.3.4", "port": "8080", "id": "uuid", "ps": "Test VMess"}
        parsed = self.parser.parse("vmess://" + b64(json.dumps(payload)))
        assert parsed.protocol == Protocol.VMESS
        assert (parsed.host, parsed.port, parsed.name) == ("1.2.3.4", 8080, "Test VMess")

    def test_vless(self):
        parsed = self.parser.parse("vless://uuid@2.3.4.5:443?encryption=none&security=tls#Test%20VLESS")
        assert (parsed.protocol, parsed.host, parsed.port, parsed.name) == (Protocol.VLESS, "2.3.4.5", 443, "Test VLESS")

    def test_trojan_default_port(self):
        parsed = self.parser.parse("trojan://password@example.com")
        assert (parsed.host, parsed.port) == ("example.com", 443)

    def test_shadowsocks_sip002(self):
        parsed = self.parser.parse("ss://" + b64("aes-256-gcm:pw") + "@4.5.6.7:8388#SS")
        assert (parsed.protocol, parsed.host, parsed.port, parsed.name) == (Protocol.SHADOWSOCKS, "4.5.6.7", 8388, "SS")

    def test_shadowsocks_legacy(self):
        parsed = self.parser.parse("ss://" + b64("aes-128-gcm:pw@ss.example.com:443"))
        assert (parsed.host, parsed.port) == ("ss.example.com", 443)

    def test_invalid(self):
        assert self.parser.parse("vmess://not-base64-json") is None
        assert self.parser.parse("vless://2.3.4.5:443") is None
        assert self.parser.parse("ss://nohost") is None
        assert self.parser.parse("trojan://pw@0.0.0.0:443") is None
        assert self.parser.parse("ssr://whatever") is None
        assert self.parser.parse("no scheme") is None
