"""
AI extraction adapter backed by Google Gemini.

Wraps the remote model behind a uniform, never-raising interface: any
failure (no key, remote error, malformed output) degrades to "found
nothing" so the caller can fall through to literal extraction.
"""

import json
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

import google.generativeai as genai

from nodescout.core.models import NodeRecord

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 10000
ADVICE_SAMPLE_SIZE = 20
ADVICE_UNAVAILABLE = "AI advice is not configured."
ADVICE_FAILED = "Analysis failed."
ADVICE_EMPTY = "No advice available."

NODE_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "protocol": {"type": "STRING", "description": "Protocol type (vmess, vless, ss, trojan)"},
            "name": {"type": "STRING", "description": "A meaningful name for the node."},
            "address": {"type": "STRING", "description": "IP address or domain"},
            "port": {"type": "INTEGER", "description": "Port number"},
            "country": {"type": "STRING", "description": "Country name"},
            "rawLink": {"type": "STRING", "description": "The full original link"},
        },
        "required": ["protocol", "address", "port", "rawLink"],
    },
}

ModelFactory = Callable[..., Any]


def parse_node_response(text: Optional[str]) -> Optional[List[Dict[str, Any]]]:
    """Validate a model response as a JSON array of objects.

    Returns ``None`` when the response is unusable as a whole; non-object
    items inside a valid array are dropped individually.
    """
    if not text or not text.strip():
        return None
    try:
        data = json.loads(text)
    except ValueError:
        return None
    if not isinstance(data, list):
        return None
    return [item for item in data if isinstance(item, dict)]


class GeminiExtractor:
    """
    Extract structured node candidates from free text with Gemini.

    The model is created lazily per call through ``model_factory``
    (``genai.GenerativeModel`` by default), so tests can substitute a
    fake without touching the network.
    """

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = "gemini-1.5-flash",
        advice_model_name: str = "gemini-1.5-flash",
        max_chars: int = DEFAULT_MAX_CHARS,
        model_factory: Optional[ModelFactory] = None,
    ):
        self.api_key = api_key or None
        self.model_name = model_name
        self.advice_model_name = advice_model_name
        self.max_chars = max_chars
        self._model_factory = model_factory or genai.GenerativeModel
        self._configured = False
        self.last_error: Optional[str] = None

    @classmethod
    def from_config(cls, config) -> "GeminiExtractor":
        return cls(
            api_key=config.get("gemini_api_key"),
            model_name=config.get("gemini_model"),
            advice_model_name=config.get("advice_model"),
            max_chars=config.get("ai_max_chars", DEFAULT_MAX_CHARS),
        )

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    def _ensure_configured(self):
        if not self._configured:
            genai.configure(api_key=self.api_key)
            self._configured = True

    def _truncate(self, text: str) -> str:
        if len(text) <= self.max_chars:
            return text
        logger.info(f"AI input truncated from {len(text)} to {self.max_chars} characters")
        return text[:self.max_chars]

    def extract_structured(self, text: str) -> List[Dict[str, Any]]:
        """Return candidate node dicts found in ``text``, or ``[]`` on any failure."""
        self.last_error = None
        if not self.available:
            logger.warning("Gemini API key not configured, AI extraction unavailable")
            self.last_error = "API key not configured"
            return []
        if not text or not text.strip():
            return []

        prompt = f"Extract proxy nodes from this text: {self._truncate(text)}"
        try:
            self._ensure_configured()
            model = self._model_factory(
                model_name=self.model_name,
                generation_config={
                    "temperature": 0.0,
                    "response_mime_type": "application/json",
                    "response_schema": NODE_RESPONSE_SCHEMA,
                },
            )
            response = model.generate_content(prompt)
            response_text = response.text
        except Exception as e:
            logger.warning(f"Gemini extraction failed: {e}")
            self.last_error = str(e) or type(e).__name__
            return []

        candidates = parse_node_response(response_text)
        if candidates is None:
            logger.warning("Gemini returned malformed JSON, discarding response")
            self.last_error = "malformed JSON response"
            return []

        logger.info(f"Gemini returned {len(candidates)} candidates")
        return candidates

    def generate_advice(self, records: Iterable[NodeRecord]) -> str:
        """Short natural-language assessment of the collected nodes."""
        if not self.available:
            return ADVICE_UNAVAILABLE

        sample = list(records)[:ADVICE_SAMPLE_SIZE]
        summary = "\n".join(f"{r.protocol.value} - {r.country}" for r in sample)
        prompt = f"Analyze these proxy nodes and give brief advice:\n\n{summary}"
        try:
            self._ensure_configured()
            model = self._model_factory(model_name=self.advice_model_name)
            response = model.generate_content(prompt)
            return response.text or ADVICE_EMPTY
        except Exception as e:
            logger.warning(f"Gemini advice failed: {e}")
            return ADVICE_FAILED
