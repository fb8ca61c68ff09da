from __future__ import annotations

import copy
import json
import threading
from typing import Any

from cachetools import TTLCache

from promolink.core.config import Settings

CACHE_NAMES = ("product_offers", "logs")


def _normalized_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), sort_keys=True, ensure_ascii=False, default=str)


class _TTLStore:
    def __init__(self, maxsize: int, ttl_seconds: int) -> None:
        self._cache: TTLCache[str, Any] = TTLCache(maxsize=maxsize, ttl=ttl_seconds)
        self._lock = threading.RLock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            if key not in self._cache:
                return None
            return copy.deepcopy(self._cache[key])

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._cache[key] = copy.deepcopy(value)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


class CacheManager:
    """In-process TTL caches, one per cached concern.

    Owned by the application context; product offers expire quickly because
    commission data moves, log listings are kept for an hour and dropped as
    soon as a new log row is written.
    """

    def __init__(self, settings: Settings) -> None:
        self.enabled = settings.cache_enabled
        self.product_offers = _TTLStore(
            maxsize=settings.cache_maxsize,
            ttl_seconds=settings.cache_product_offers_ttl_seconds,
        )
        self.logs = _TTLStore(
            maxsize=settings.cache_maxsize,
            ttl_seconds=settings.cache_logs_ttl_seconds,
        )

    def build_key(self, operation: str, request_payload: dict[str, Any], version: str = "v1") -> str:
        return f"{operation}:{version}:{_normalized_json(request_payload)}"

    def _store(self, cache_name: str) -> _TTLStore:
        if cache_name not in CACHE_NAMES:
            raise KeyError(f"Unknown cache: {cache_name}")
        return getattr(self, cache_name)

    def get(self, cache_name: str, key: str) -> Any | None:
        if not self.enabled:
            return None
        return self._store(cache_name).get(key)

    def set(self, cache_name: str, key: str, value: Any) -> None:
        if not self.enabled:
            return
        self._store(cache_name).set(key, value)

    def invalidate(self, cache_name: str) -> None:
        self._store(cache_name).clear()

    def clear_all(self) -> None:
        for name in CACHE_NAMES:
            self._store(name).clear()
