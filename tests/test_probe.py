"""
Tests for the TCP reachability probe.
"""

from nodescout.core.models import NodeRecord, NodeStatus, Protocol
from nodescout.core.utils import new_id
from nodescout.extraction.normalizer import normalize_link
from nodescout.network.probe import ReachabilityProbe


class FakeConnection:
    def __init__(self):
        self.closed = False

    def close(self):
        self.closed = True


class FakeConnector:
    def __init__(self, reachable):
        self.reachable = set(reachable)
        self.attempts = []

    def __call__(self, address, timeout):
        self.attempts.append((address, timeout))
        if address not in self.reachable:
            raise ConnectionRefusedError(f"refused {address}")
        return FakeConnection()


def node(address, port, status=NodeStatus.UNTESTED):
    return NodeRecord(
        id=new_id(), protocol=Protocol.TROJAN, name="n", address=address, port=port,
        raw_link=f"trojan://pw@{address}:{port}", status=status,
    )


class TestReachabilityProbe:

    def test_active_and_timeout(self):
        connector = FakeConnector({("1.1.1.1", 443)})
        probe = ReachabilityProbe(timeout=2, max_workers=2, connector=connector)
        up, down = probe.probe_all([node("1.1.1.1", 443), node("2.2.2.2", 443)])

        assert up.status == NodeStatus.ACTIVE and up.latency >= 1
        assert down.status == NodeStatus.TIMEOUT and down.latency == 0
        assert all(t == 2 for _, t in connector.attempts)

    def test_ids_and_order_preserved(self):
        records = [node("1.1.1.1", 443), node("2.2.2.2", 443), node("3.3.3.3", 443)]
        probe = ReachabilityProbe(connector=FakeConnector(set()))
        result = probe.probe_all(records)
        assert [r.id for r in result] == [r.id for r in records]

    def test_regex_record_uses_parsed_link(self):
        connector = FakeConnector({("example.com", 8443)})
        record = normalize_link("vless://uuid@example.com:8443?security=tls#name")
        result = ReachabilityProbe(connector=connector).probe_all([record])[0]
        assert result.status == NodeStatus.ACTIVE
        assert result.address == "unknown" and result.port == 0
        assert connector.attempts[0][0] == ("example.com", 8443)

    def test_unparseable_link_times_out(self):
        connector = FakeConnector(set())
        result = ReachabilityProbe(connector=connector).probe_all([normalize_link("ssr://garbage")])[0]
        assert result.status == NodeStatus.TIMEOUT
        assert connector.attempts == []

    def test_only_untested_by_default(self):
        connector = FakeConnector({("1.1.1.1", 443)})
        tested = node("1.1.1.1", 443, status=NodeStatus.TIMEOUT)
        result = ReachabilityProbe(connector=connector).probe_all([tested])
        assert result[0].status == NodeStatus.TIMEOUT
        assert connector.attempts == []

        result = ReachabilityProbe(connector=connector).probe_all([tested], only_untested=False)
        assert result[0].status == NodeStatus.ACTIVE

    def test_progress_callback(self):
        seen = []
        ReachabilityProbe(connector=FakeConnector(set())).probe_all(
            [node("1.1.1.1", 1), node("2.2.2.2", 2)], progress=seen.append
        )
        assert len(seen) == 2
