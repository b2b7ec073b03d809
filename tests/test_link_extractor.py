"""
Tests for literal link extraction.
"""

from nodescout.parsers.link_extractor import extract_links


class TestExtractLinks:

    def test_scenario_vmess_then_vless(self):
        assert extract_links("vmess://abc123 vless://xyz789") == ["vmess://abc123", "vless://xyz789"]

    def test_protocol_block_ordering(self):
        text = "trojan://t1\nss://s1 vless://l1\nssr://r1 vmess://v1 vmess://v2"
        assert extract_links(text) == [
            "vmess://v1", "vmess://v2",
            "vless://l1",
            "ss://s1",
            "ssr://r1",
            "trojan://t1",
        ]

    def test_stops_at_delimiters(self):
        html = '<a href="vmess://abc">x</a> <b>vless://def</b> \'trojan://ghi\''
        assert extract_links(html) == ["vmess://abc", "vless://def", "trojan://ghi"]

    def test_ssr_is_not_reported_as_ss(self):
        assert extract_links("ssr://abcdef") == ["ssr://abcdef"]

    def test_scheme_inside_word_is_ignored(self):
        assert extract_links("vless://uuid@h:443") == ["vless://uuid@h:443"]

    def test_scheme_needs_a_body(self):
        assert extract_links("vmess:// trojan://") == []

    def test_case_sensitive(self):
        assert extract_links("VMESS://abc") == []

    def test_empty_input(self):
        assert extract_links("") == []
        assert extract_links("nothing to see here") == []
