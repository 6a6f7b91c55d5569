from core.cache import CacheStrategy, InMemoryCache


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_entries_expire():
    clock = FakeClock()
    cache = InMemoryCache({"author": CacheStrategy(ttl_s=10, max_entries=5)}, clock=clock)

    cache.set("author", "u1", {"name": "A"})
    assert cache.get("author", "u1") == {"name": "A"}

    clock.now += 10
    assert cache.get("author", "u1") is None


def test_oldest_entry_is_evicted_first():
    cache = InMemoryCache({"author": CacheStrategy(ttl_s=60, max_entries=2)})

    cache.set("author", "u1", 1)
    cache.set("author", "u2", 2)
    cache.set("author", "u3", 3)

    assert cache.get("author", "u1") is None
    assert cache.get("author", "u2") == 2
    assert cache.get("author", "u3") == 3


def test_invalidate_key_and_domain():
    cache = InMemoryCache()
    cache.set("album-detail", "a1", 1)
    cache.set("album-detail", "a2", 2)
    cache.set("site-settings", "current", {})

    cache.invalidate("album-detail", "a1")
    assert cache.get("album-detail", "a1") is None
    assert cache.get("album-detail", "a2") == 2

    cache.invalidate("album-detail")
    assert cache.get("album-detail", "a2") is None
    assert cache.get("site-settings", "current") == {}


def test_unknown_domain_uses_default_strategy():
    cache = InMemoryCache()
    cache.set("anime-detail", "x", "value")
    assert cache.get("anime-detail", "x") == "value"
