"""
Parsers module initialization.

This module provides the text-level parsing stages: recursive Base64
decoding, literal link extraction and per-protocol endpoint parsing.
"""

from .decoder import recursive_decode, is_base64_shaped
from .link_extractor import extract_links, LINK_PROTOCOLS
from .uri_parser import (
    ParsedEndpoint,
    VMessParser,
    URLStyleParser,
    ShadowsocksParser,
    UniversalParser
)

__all__ = [
    "recursive_decode",
    "is_base64_shaped",
    "extract_links",
    "LINK_PROTOCOLS",
    "ParsedEndpoint",
    "VMessParser",
    "URLStyleParser",
    "ShadowsocksParser",
    "UniversalParser"
]
