"""
Response cache port.

Handlers receive a `CachePort` through `get_cache` (FastAPI dependency) instead
of reaching for a module-level cache. The asset garbage collector never reads
through this cache: reference state must be fresh at sweep time.

`InMemoryCache` keeps one dict per domain with a TTL and a FIFO capacity limit.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Protocol

from fastapi import Request


class CachePort(Protocol):
    def get(self, domain: str, key: str) -> Any | None:
        ...

    def set(self, domain: str, key: str, value: Any) -> None:
        ...

    def invalidate(self, domain: str, key: str | None = None) -> None:
        ...


@dataclass(frozen=True)
class CacheStrategy:
    ttl_s: float
    max_entries: int


DEFAULT_STRATEGY = CacheStrategy(ttl_s=60.0, max_entries=100)

STRATEGIES: dict[str, CacheStrategy] = {
    "author": CacheStrategy(ttl_s=5 * 60.0, max_entries=500),
    "site-settings": CacheStrategy(ttl_s=60.0, max_entries=5),
    "article-detail": CacheStrategy(ttl_s=2 * 60.0, max_entries=200),
    "album-detail": CacheStrategy(ttl_s=2 * 60.0, max_entries=100),
    "diary-detail": CacheStrategy(ttl_s=2 * 60.0, max_entries=100),
}


class InMemoryCache:
    def __init__(self, strategies: dict[str, CacheStrategy] | None = None, *, clock=time.monotonic) -> None:
        self._strategies = strategies if strategies is not None else STRATEGIES
        self._stores: dict[str, dict[str, tuple[float, Any]]] = {}
        self._clock = clock

    def _strategy(self, domain: str) -> CacheStrategy:
        return self._strategies.get(domain, DEFAULT_STRATEGY)

    def get(self, domain: str, key: str) -> Any | None:
        store = self._stores.get(domain)
        if not store or key not in store:
            return None
        expires_at, value = store[key]
        if expires_at <= self._clock():
            del store[key]
            return None
        return value

    def set(self, domain: str, key: str, value: Any) -> None:
        strategy = self._strategy(domain)
        if strategy.ttl_s <= 0 or strategy.max_entries <= 0:
            return None
        store = self._stores.setdefault(domain, {})
        store.pop(key, None)
        while len(store) >= strategy.max_entries:
            # dicts keep insertion order, so the first key is the oldest entry
            del store[next(iter(store))]
        store[key] = (self._clock() + strategy.ttl_s, value)

    def invalidate(self, domain: str, key: str | None = None) -> None:
        if key is None:
            self._stores.pop(domain, None)
            return None
        store = self._stores.get(domain)
        if store is not None:
            store.pop(key, None)


def get_cache(request: Request) -> CachePort:
    return request.app.state.cache
