"""Bounded TTL cache for per-source fetch results."""
from __future__ import annotations

import json
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from jobradar.log import get_logger

log = get_logger(__name__)


@dataclass
class CacheEntry:
    payload: Any
    expires_at: float


def make_cache_key(source_name: str, params: Mapping[str, Any]) -> str:
    """Deterministic key; parameter order never changes the result."""
    parts = [
        f"{name}:{json.dumps(params[name], sort_keys=True, default=str)}"
        for name in sorted(params)
    ]
    return "|".join([source_name, *parts])


class ResponseCache:
    """LRU-bounded key/value store with per-entry expiry.

    Safe to share between source worker threads.
    """

    def __init__(
        self,
        max_entries: int = 50,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> tuple[Any, bool]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None, False
            if self._clock() > entry.expires_at:
                del self._entries[key]
                log.debug("Cache expired: %s", key)
                return None, False
            self._entries.move_to_end(key)
            return entry.payload, True

    def set(self, key: str, payload: Any, ttl_seconds: float) -> None:
        with self._lock:
            if key in self._entries:
                del self._entries[key]
            elif len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                log.debug("Cache full (%d), evicted %s", self.max_entries, evicted)
            self._entries[key] = CacheEntry(payload, self._clock() + ttl_seconds)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
