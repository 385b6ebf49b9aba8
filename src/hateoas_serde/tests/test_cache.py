import pytest

from ..cache import InMemoryCacheBackend, ResponseCache
from ..envelope import RequestInfo


class Clock:
    now = 0.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def backend(clock):
    return InMemoryCacheBackend(clock)


class TestInMemoryCacheBackend:
    def test_lifetime(self, backend, clock):
        assert backend.put("k", "body", 60)
        assert backend.contains("k")
        clock.now = 59
        assert backend.get("k") == "body"
        clock.now = 60
        assert backend.get("k") is None
        assert not backend.contains("k")

    def test_invalidate_tags(self, backend):
        backend.put("a", "1", 60, ["product", "product:1"])
        backend.put("b", "2", 60, ["product", "product:2"])
        backend.put("c", "3", 60, ["event"])
        assert backend.invalidate_tags(["product:1"]) == 1
        assert backend.get("a") is None
        assert backend.invalidate_tags(["product"]) == 1
        assert backend.get("b") is None
        assert backend.get("c") == "3"

    def test_entry_evicted_by_another_request(self, backend):
        backend.put("k", "body", 10, ["product"])

        def racing_clock():
            backend._entries.pop("k", None)
            return 100.0

        backend.clock = racing_clock
        assert backend.get("k") is None
        assert not backend.contains("k")

    def test_expired_entries_are_purged_on_put(self, backend, clock):
        for i in range(1000):
            backend.put(f"k{i}", "body", 1, ["event", f"event:{i}"])
        assert len(backend) == 1000

        clock.now = 100
        backend.put("fresh", "body", 60, ["event"])
        assert len(backend) == 1
        assert backend._tags == {"event": {"fresh"}}
        assert backend._expiries == [(160, "fresh")]

    def test_rewritten_entry_outlives_its_first_expiry(self, backend, clock):
        backend.put("k", "old", 10, ["product"])
        clock.now = 5
        backend.put("k", "new", 60, ["event"])
        clock.now = 20
        backend.put("other", "body", 60)
        assert backend.get("k") == "new"
        assert backend.invalidate_tags(["product"]) == 0
        assert backend.invalidate_tags(["event"]) == 1
        assert len(backend) == 1


class TestResponseCache:
    def test_key_is_independent_of_query_order(self, backend):
        target = ResponseCache(backend)
        a = target.key_for(RequestInfo("/event", {"a": "1", "b": "2"}))
        b = target.key_for(RequestInfo("/event", {"b": "2", "a": "1"}))
        assert a == b
        assert a != target.key_for(RequestInfo("/event", {"a": "1"}))
        assert a != target.key_for(RequestInfo("/event/1", {"a": "1", "b": "2"}))

    def test_check_then_fill(self, backend):
        target = ResponseCache(backend)
        request = RequestInfo("/event/1/product")
        assert target.inspect(request) is None
        assert target.add(request, "[1]", 600)
        assert not target.add(request, "[2]", 600)
        assert target.inspect(request) == "[1]"

    def test_concurrent_fills_are_tolerated(self, backend):
        target = ResponseCache(backend)
        request = RequestInfo("/event")
        key = target.key_for(request)
        backend.put(key, "[1]", 60)
        backend.put(key, "[1]", 60)
        assert target.inspect(request) == "[1]"

    def test_skip_param(self, backend):
        target = ResponseCache(backend)
        target.add(RequestInfo("/event"), "[1]", 60)
        skipping = RequestInfo("/event", {"skipCache": "1"})
        assert target.inspect(skipping) is None
        assert not target.add(skipping, "[2]", 60)

    def test_disabled(self, backend):
        target = ResponseCache(backend, enabled=False)
        request = RequestInfo("/event")
        assert not target.add(request, "[1]", 60)
        assert target.inspect(request) is None
        assert not backend.contains(target.key_for(request))

    def test_invalidate(self, backend):
        target = ResponseCache(backend)
        request = RequestInfo("/address/1")
        target.add(request, "{}", 60, ["address:1"])
        assert target.invalidate(["address:1"]) == 1
        assert target.inspect(request) is None
