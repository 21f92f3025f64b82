"""
cache_service.py — AI response cache
Reports and reflections are expensive to regenerate, so identical requests
made within a short window are answered from memory. Entries are bounded
in number: a full cache first drops expired entries, then the least recently
used ones.
"""

import hashlib
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable


@dataclass
class CachedResponse:
    response: dict
    expires_at: float
    hits: int = 0


class ResponseCache:
    def __init__(self, max_entries: int = 256, clock: Callable[[], float] = time.monotonic):
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CachedResponse] = OrderedDict()
        self._hits = 0
        self._misses = 0

    @staticmethod
    def _key(prompt: str, schema_key: str) -> str:
        digest = hashlib.sha256()
        for part in (prompt, schema_key):
            digest.update(part.encode("utf-8"))
            digest.update(b"\x00")
        return digest.hexdigest()

    def get(self, prompt: str, schema_key: str = "") -> dict | None:
        key = self._key(prompt, schema_key)
        entry = self._entries.get(key)
        if entry is not None and entry.expires_at <= self._clock():
            del self._entries[key]
            entry = None
        if entry is None:
            self._misses += 1
            return None
        entry.hits += 1
        self._hits += 1
        self._entries.move_to_end(key)
        return entry.response

    def set(self, prompt: str, response: dict, ttl_seconds: int, schema_key: str = ""):
        """Remember a response for ttl_seconds. A TTL of zero or less disables caching."""
        if ttl_seconds <= 0:
            return
        key = self._key(prompt, schema_key)
        self._entries[key] = CachedResponse(response=response, expires_at=self._clock() + ttl_seconds)
        self._entries.move_to_end(key)
        if len(self._entries) > self.max_entries:
            self.clear_expired()
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def clear_expired(self) -> int:
        now = self._clock()
        stale = [k for k, e in self._entries.items() if e.expires_at <= now]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def get_stats(self) -> dict:
        lookups = self._hits + self._misses
        return {
            "total_entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / lookups, 4) if lookups else 0.0,
        }
