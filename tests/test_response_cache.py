"""Tests for the market-data response cache."""

from finboard.services.response_cache import ResponseCache, cache_key


def test_key_is_independent_of_param_order():
    assert cache_key("finnhub", "quote", {"b": "2", "a": "1"}) == cache_key("finnhub", "quote", {"a": "1", "b": "2"})
    assert cache_key("finnhub", "quote", {"symbol": "AAPL"}) == 'finnhub:quote:{"symbol": "AAPL"}'
    assert cache_key("finnhub", "quote") == "finnhub:quote:{}"


def test_hit_until_ttl_then_miss(clock):
    cache = ResponseCache(ttl_seconds=300, clock=clock)
    cache.set("k", {"c": 1})

    clock.advance(300)
    assert cache.get("k") == {"c": 1}

    clock.advance(1)
    assert cache.get("k") is None
    assert len(cache) == 0


def test_clear(clock):
    cache = ResponseCache(ttl_seconds=10, clock=clock)
    cache.set("a", 1)
    cache.set("b", 2)
    cache.clear()
    assert cache.get("a") is None
    assert len(cache) == 0


def test_expired_entries_are_evicted_on_write(clock):
    cache = ResponseCache(ttl_seconds=10, clock=clock)
    for index in range(5):
        cache.set(f"old-{index}", index)

    clock.advance(11)
    cache.set("fresh", "x")

    assert len(cache) == 1
    assert cache.get("fresh") == "x"
