"""TTLResultCache — in-process cache where each entry carries its own deadline."""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional

from core.config import SYMBOL_CACHE_TTL
from storage.base import ResultCache, V


class TTLResultCache(ResultCache[V]):
    """
    Dict-backed cache with lazy expiry.

    Deadlines are fixed at put() time; get() treats an expired entry as absent
    but leaves it in place, so only put(), invalidate(), clear() and
    purge_expired() remove entries. There is no size bound and no background
    sweep.
    """

    def __init__(self, ttl: float = SYMBOL_CACHE_TTL, clock: Callable[[], float] = time.monotonic):
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        self.ttl    = ttl
        self._clock = clock
        self._lock  = threading.Lock()
        self._entries: dict[str, tuple[float, V]] = {}

    def get(self, key: str) -> Optional[V]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            deadline, value = entry
            if self._clock() >= deadline:
                return None
            return value

    def peek(self, key: str) -> Optional[V]:
        """Return the stored value for key even if it has expired."""
        with self._lock:
            entry = self._entries.get(key)
            return None if entry is None else entry[1]

    def put(self, key: str, value: V, ttl: Optional[float] = None) -> None:
        deadline = self._clock() + (self.ttl if ttl is None else ttl)
        with self._lock:
            self._entries[key] = (deadline, value)

    def invalidate(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        """Remove every expired entry; return how many were dropped."""
        now = self._clock()
        with self._lock:
            dead = [k for k, (deadline, _) in self._entries.items() if now >= deadline]
            for k in dead:
                del self._entries[k]
        return len(dead)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        self.purge_expired()
        return len(self._entries)
