from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class CacheEntry:
    data: Any
    timestamp: float
    ttl: float

    def expired(self, now: float) -> bool:
        return now - self.timestamp > self.ttl


class ResponseCache:
    """Bounded TTL map of response payloads.

    Expired entries are evicted on read and on insert; when full, the
    oldest insert goes first.
    """

    def __init__(self, max_entries: int = 256, clock: Callable[[], float] = time.monotonic) -> None:
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._max_entries = max_entries
        self._clock = clock

    @staticmethod
    def make_key(method: str, url: str, body: str = "") -> str:
        return f"{method.upper()}:{url}:{body}"

    def get(self, key: str) -> tuple[bool, Any]:
        """Return ``(hit, data)``; a cached ``None`` is still a hit."""
        entry = self._entries.get(key)
        if entry is None:
            return False, None
        if entry.expired(self._clock()):
            del self._entries[key]
            return False, None
        return True, entry.data

    def set(self, key: str, data: Any, ttl: float) -> None:
        now = self._clock()
        self._evict_expired(now)
        self._entries.pop(key, None)
        while len(self._entries) >= self._max_entries:
            self._entries.popitem(last=False)
        self._entries[key] = CacheEntry(data, now, ttl)

    def _evict_expired(self, now: float) -> None:
        for key in [k for k, e in self._entries.items() if e.expired(now)]:
            del self._entries[key]

    def clear(self, pattern: str | None = None) -> int:
        """Drop every entry whose key contains ``pattern`` (all when None)."""
        if pattern is None:
            count = len(self._entries)
            self._entries.clear()
            return count
        keys = [k for k in self._entries if pattern in k]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key)[0]
