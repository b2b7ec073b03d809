"""
Extraction strategy chain.

A scan runs an ordered list of strategies and stops at the first one
that yields records:

    ai    -> [AIStrategy?, RegexStrategy]
    regex -> [RegexStrategy]
    deep  -> recursive decode, then the ai chain

``AIStrategy`` only joins the chain when the adapter has credentials.
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple

from nodescout.core.dedup import dedup_batch
from nodescout.core.models import NodeRecord
from nodescout.core.scan_log import ScanLog
from nodescout.extraction.ai_adapter import GeminiExtractor
from nodescout.extraction.normalizer import normalize_link, normalize_partial
from nodescout.parsers.link_extractor import extract_links

logger = logging.getLogger(__name__)


class ScanMode(str, Enum):
    AI = "ai"
    REGEX = "regex"
    DEEP = "deep"


class ExtractionStrategy:
    """One way of turning text into normalized records."""

    name = "base"

    def extract(self, text: str, scan_log: ScanLog) -> List[NodeRecord]:
        raise NotImplementedError


class AIStrategy(ExtractionStrategy):
    name = "ai"

    def __init__(self, extractor: GeminiExtractor):
        self.extractor = extractor

    def extract(self, text: str, scan_log: ScanLog) -> List[NodeRecord]:
        scan_log.info("Calling Gemini AI model...")
        if len(text) > self.extractor.max_chars:
            scan_log.warning(
                f"Input is {len(text)} characters, AI sees only the first {self.extractor.max_chars}"
            )
        candidates = self.extractor.extract_structured(text)
        if self.extractor.last_error:
            scan_log.warning(f"AI extraction failed ({self.extractor.last_error})")

        records = []
        for candidate in candidates:
            record = normalize_partial(candidate)
            if record is None:
                continue
            records.append(record)

        dropped = len(candidates) - len(records)
        if dropped:
            scan_log.warning(f"Dropped {dropped} AI candidate(s) without a raw link")
        return dedup_batch(records)


class RegexStrategy(ExtractionStrategy):
    name = "regex"

    def extract(self, text: str, scan_log: ScanLog) -> List[NodeRecord]:
        scan_log.info("Running standard link pattern matching...")
        return dedup_batch(normalize_link(link) for link in extract_links(text))


class ExtractionChain:
    """Evaluates strategies in order until one produces records."""

    def __init__(self, strategies: List[ExtractionStrategy]):
        self.strategies = list(strategies)

    def run(self, text: str, scan_log: ScanLog) -> Tuple[List[NodeRecord], Optional[str]]:
        for index, strategy in enumerate(self.strategies):
            try:
                records = strategy.extract(text, scan_log)
            except Exception as e:
                logger.exception(f"Strategy {strategy.name} failed")
                scan_log.warning(f"{strategy.name} extraction failed: {e}")
                records = []

            if records:
                return records, strategy.name
            if index + 1 < len(self.strategies):
                scan_log.info(f"{strategy.name} returned no results, falling back to {self.strategies[index + 1].name}")
        return [], None


def build_chain(mode: ScanMode, extractor: Optional[GeminiExtractor], scan_log: ScanLog) -> ExtractionChain:
    strategies: List[ExtractionStrategy] = []
    if mode in (ScanMode.AI, ScanMode.DEEP):
        if extractor is not None and extractor.available:
            strategies.append(AIStrategy(extractor))
        else:
            scan_log.warning("API key not configured, falling back to pattern mode")
    strategies.append(RegexStrategy())
    return ExtractionChain(strategies)
