"""
Tests for key-value stores and the node repository.
"""

import json

import pytest

from nodescout.core.errors import StoreError
from nodescout.core.models import NodeStatus, SourceConfig
from nodescout.core.store import NODES_KEY, JsonFileStore, MemoryStore, NodeRepository
from nodescout.extraction.normalizer import normalize_link, normalize_partial


class TestJsonFileStore:

    def test_round_trip(self, tmp_path):
        store = JsonFileStore(str(tmp_path / "sub" / "store.json"))
        assert store.get("k") is None
        store.put("k", "värde".encode("utf-8"))
        assert JsonFileStore(store.path).get("k").decode("utf-8") == "värde"
        store.delete("k")
        assert store.get("k") is None

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{broken")
        with pytest.raises(StoreError):
            JsonFileStore(str(path)).get("k")

    def test_non_utf8_value(self, tmp_path):
        with pytest.raises(StoreError):
            JsonFileStore(str(tmp_path / "s.json")).put("k", b"\xff\xfe")


class TestNodeRepository:

    def test_nodes_round_trip(self):
        repo = NodeRepository(MemoryStore())
        records = [
            normalize_link("vmess://abc"),
            normalize_partial({"protocol": "trojan", "address": "h", "port": 8443, "country": "Japan",
                               "rawLink": "trojan://pw@h:8443"}),
        ]
        records[1] = records[1].with_status(NodeStatus.ACTIVE, 120)
        repo.save_nodes(records)
        assert repo.load_nodes() == records

    def test_persisted_form_uses_raw_link_key(self):
        store = MemoryStore()
        NodeRepository(store).save_nodes([normalize_link("ss://x")])
        saved = json.loads(store.get(NODES_KEY))
        assert saved[0]["rawLink"] == "ss://x"
        assert saved[0]["status"] == "untested"

    def test_corrupt_nodes_start_empty(self):
        repo = NodeRepository(MemoryStore({NODES_KEY: b"not json"}))
        assert repo.load_nodes() == []

    def test_malformed_entry_skipped(self):
        good = normalize_link("ss://x").to_dict()
        store = MemoryStore({NODES_KEY: json.dumps([good, {"no": "id"}]).encode()})
        assert [n.raw_link for n in NodeRepository(store).load_nodes()] == ["ss://x"]

    def test_delete_and_clear(self):
        repo = NodeRepository(MemoryStore())
        a, b = normalize_link("ss://a"), normalize_link("ss://b")
        repo.save_nodes([a, b])
        assert repo.delete_node(a.id)
        assert not repo.delete_node("missing")
        assert [n.id for n in repo.load_nodes()] == [b.id]
        repo.clear()
        assert repo.load_nodes() == []

    def test_sources(self):
        repo = NodeRepository(MemoryStore())
        assert repo.load_sources() == SourceConfig(urls=[])
        assert repo.add_source("https://a.example/sub")
        assert not repo.add_source("https://a.example/sub")
        assert not repo.add_source("   ")
        assert repo.add_source("https://b.example/sub")
        assert repo.load_sources().urls == ["https://a.example/sub", "https://b.example/sub"]
        assert repo.remove_source("https://a.example/sub")
        assert not repo.remove_source("https://a.example/sub")
        assert repo.load_sources().urls == ["https://b.example/sub"]


class TestCorruptStoreFile:

    @pytest.fixture
    def repo(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json")
        return NodeRepository(JsonFileStore(str(path)))

    def test_reads_degrade_to_empty(self, repo):
        assert repo.load_nodes() == []
        assert repo.load_sources().urls == []

    def test_mutators_report_failure(self, repo):
        assert not repo.clear()
        assert not repo.delete_node("anything")
        assert not repo.add_source("https://a.example/sub")
        assert not repo.remove_source("https://a.example/sub")
        assert not repo.save_sources(SourceConfig(urls=["https://a.example/sub"]))
