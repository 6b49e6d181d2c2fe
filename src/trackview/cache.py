"""In-memory LRU cache for computed route reports."""

import hashlib
from collections import OrderedDict
from dataclasses import dataclass
from threading import Lock

from trackview.models import PaceParams


@dataclass
class CacheStats:
    """Statistics for a cache instance."""
    hits: int = 0
    misses: int = 0
    size: int = 0
    max_size: int = 0

    @property
    def hit_rate(self) -> str:
        """Return hit rate as percentage string."""
        total = self.hits + self.misses
        if total == 0:
            return "0.0%"
        return f"{(self.hits / total * 100):.1f}%"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "hit_rate": self.hit_rate,
            "hits": self.hits,
            "misses": self.misses,
            "size": self.size,
            "max_size": self.max_size,
        }


class RouteCache:
    """Thread-safe LRU cache of route reports keyed by route and pace parameters."""

    def __init__(self, max_size: int = 50):
        self.max_size = max_size
        self.cache: OrderedDict[str, dict] = OrderedDict()
        self.lock = Lock()
        self.hits = 0
        self.misses = 0

    def _make_key(self, route_id: str, params: PaceParams) -> str:
        key_str = f"{route_id}|{params.min_pace}|{params.max_pace}|{params.smoothing_window_s}"
        return hashlib.md5(key_str.encode()).hexdigest()

    def get(self, route_id: str, params: PaceParams) -> dict | None:
        """Get cached report, returns None if not found."""
        key = self._make_key(route_id, params)
        with self.lock:
            if key in self.cache:
                self.cache.move_to_end(key)
                self.hits += 1
                return self.cache[key]
            self.misses += 1
            return None

    def set(self, route_id: str, params: PaceParams, report: dict) -> None:
        """Store report in cache, evicting the least recently used entries."""
        key = self._make_key(route_id, params)
        with self.lock:
            if key in self.cache:
                self.cache.move_to_end(key)
            self.cache[key] = report
            while len(self.cache) > self.max_size:
                self.cache.popitem(last=False)

    def clear(self) -> int:
        """Clear the cache. Returns number of entries removed."""
        with self.lock:
            count = len(self.cache)
            self.cache.clear()
            self.hits = 0
            self.misses = 0
            return count

    def stats(self) -> CacheStats:
        with self.lock:
            return CacheStats(
                hits=self.hits,
                misses=self.misses,
                size=len(self.cache),
                max_size=self.max_size,
            )
