"""
Tests for the extraction strategy chain.
"""

from nodescout.core.models import Protocol, Severity
from nodescout.extraction.strategies import (
    AIStrategy,
    ExtractionChain,
    ExtractionStrategy,
    RegexStrategy,
    ScanMode,
    build_chain,
)


class ExplodingStrategy(ExtractionStrategy):
    name = "exploding"

    def extract(self, text, scan_log):
        raise RuntimeError("kaboom")


class TestBuildChain:

    def test_regex_mode(self, make_extractor, scan_log):
        extractor, _ = make_extractor([])
        chain = build_chain(ScanMode.REGEX, extractor, scan_log)
        assert [s.name for s in chain.strategies] == ["regex"]

    def test_ai_mode_with_key(self, make_extractor, scan_log):
        extractor, _ = make_extractor([])
        chain = build_chain(ScanMode.AI, extractor, scan_log)
        assert [s.name for s in chain.strategies] == ["ai", "regex"]

    def test_ai_mode_without_key_degrades(self, make_extractor, scan_log):
        extractor, _ = make_extractor([], api_key=None)
        chain = build_chain(ScanMode.AI, extractor, scan_log)
        assert [s.name for s in chain.strategies] == ["regex"]
        assert scan_log.entries[0].severity == Severity.WARNING


class TestExtractionChain:

    def test_ai_result_wins(self, make_extractor, scan_log):
        extractor, _ = make_extractor([
            {"protocol": "trojan", "address": "h", "port": 443, "rawLink": "trojan://pw@h:443"},
        ])
        chain = ExtractionChain([AIStrategy(extractor), RegexStrategy()])
        records, strategy = chain.run("trojan://pw@h:443 vmess://other", scan_log)
        assert strategy == "ai"
        assert [r.raw_link for r in records] == ["trojan://pw@h:443"]
        assert records[0].protocol == Protocol.TROJAN

    def test_empty_ai_falls_through_to_regex(self, make_extractor, scan_log):
        extractor, _ = make_extractor([])
        chain = ExtractionChain([AIStrategy(extractor), RegexStrategy()])
        records, strategy = chain.run("vless://only-this-one", scan_log)
        assert strategy == "regex"
        assert [r.raw_link for r in records] == ["vless://only-this-one"]

    def test_ai_candidates_without_link_dropped(self, make_extractor, scan_log):
        extractor, _ = make_extractor([
            {"protocol": "vmess", "address": "a", "port": 1},
            {"protocol": "vmess", "address": "b", "port": 2, "rawLink": "vmess://b"},
        ])
        records, _ = ExtractionChain([AIStrategy(extractor)]).run("text", scan_log)
        assert [r.raw_link for r in records] == ["vmess://b"]
        assert any("Dropped 1" in e.message for e in scan_log.entries)

    def test_regex_batch_deduplicated(self, scan_log):
        records, _ = ExtractionChain([RegexStrategy()]).run("ss://a ss://a ss://b", scan_log)
        assert [r.raw_link for r in records] == ["ss://a", "ss://b"]

    def test_failing_strategy_does_not_propagate(self, scan_log):
        chain = ExtractionChain([ExplodingStrategy(), RegexStrategy()])
        records, strategy = chain.run("trojan://x", scan_log)
        assert strategy == "regex"
        assert len(records) == 1
        assert any(e.severity == Severity.WARNING and "kaboom" in e.message for e in scan_log.entries)

    def test_nothing_found(self, scan_log):
        assert ExtractionChain([RegexStrategy()]).run("no links", scan_log) == ([], None)

    def test_truncated_ai_input_is_reported(self, make_extractor, scan_log):
        extractor, factory = make_extractor([], max_chars=1000)
        ExtractionChain([AIStrategy(extractor)]).run("q" * 1500, scan_log)

        assert factory.prompts[0].count("q") == 1000
        assert any(
            e.severity == Severity.WARNING and "first 1000" in e.message for e in scan_log.entries
        )
