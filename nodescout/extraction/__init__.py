"""
Extraction module initialization.

This module turns decoded text into normalized node records, either
through the Gemini adapter or through literal link matching.
"""

from .ai_adapter import GeminiExtractor, parse_node_response, NODE_RESPONSE_SCHEMA
from .normalizer import normalize_link, normalize_partial
from .strategies import (
    ScanMode,
    ExtractionStrategy,
    AIStrategy,
    RegexStrategy,
    ExtractionChain,
    build_chain
)

__all__ = [
    "GeminiExtractor",
    "parse_node_response",
    "NODE_RESPONSE_SCHEMA",
    "normalize_link",
    "normalize_partial",
    "ScanMode",
    "ExtractionStrategy",
    "AIStrategy",
    "RegexStrategy",
    "ExtractionChain",
    "build_chain"
]
