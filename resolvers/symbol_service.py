"""
SymbolCatalogService
--------------------
Serves /symbols lookups: cache first, full scrip master scan on a miss.

    lookup(exchange, master)
      ├─ cache.get("<exchange>_<master>")    → hit: return
      └─ per-key lock
           ├─ cache.get again                → another request built it
           ├─ factory.create(exchange)       → ReferenceSource
           ├─ build_catalog(...)             → CatalogResult | DataSourceError
           └─ cache.put(key, result)

A failed build leaves any existing entry for the key untouched. If that entry
has expired it is served as-is; with nothing stored the DataSourceError
propagates. Per-key locks are dropped once no thread holds or waits on them.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterator, Optional

from core.exceptions import DataSourceError
from core.utils import catalog_cache_key, ist_now
from fetchers.factory import ReferenceSourceFactory
from resolvers.base import CatalogResult
from resolvers.catalog import build_catalog
from storage.base import ResultCache
from storage.memory_cache import TTLResultCache


class SymbolCatalogService:
    """Cache-fronted catalog lookups (all collaborators injectable)."""

    def __init__(
        self,
        factory: Optional[ReferenceSourceFactory] = None,
        cache:   Optional[ResultCache[CatalogResult]] = None,
        now:     Callable[[], datetime] = ist_now,
    ):
        self.factory = factory or ReferenceSourceFactory()
        self.cache   = cache if cache is not None else TTLResultCache()
        self._now    = now
        self._locks_lock = threading.Lock()
        # key -> (lock, number of threads holding or waiting on it)
        self._build_locks: dict[str, tuple[threading.Lock, int]] = {}
        self.builds  = 0

    @contextmanager
    def _key_lock(self, key: str) -> Iterator[None]:
        with self._locks_lock:
            lock, users = self._build_locks.get(key, (None, 0))
            if lock is None:
                lock = threading.Lock()
            self._build_locks[key] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._locks_lock:
                lock, users = self._build_locks[key]
                if users == 1:
                    del self._build_locks[key]
                else:
                    self._build_locks[key] = (lock, users - 1)

    def lookup(self, exchange_symbol: str, master_symbol: str) -> CatalogResult:
        key = catalog_cache_key(exchange_symbol, master_symbol)

        cached = self.cache.get(key)
        if cached is not None:
            print(f"[SymbolService] Cache hit {key}")
            return cached

        with self._key_lock(key):
            cached = self.cache.get(key)
            if cached is not None:
                return cached

            print(f"[SymbolService] Cache miss {key}, scanning scrip master...")
            try:
                source = self.factory.create(exchange_symbol)
                result = build_catalog(exchange_symbol, master_symbol, source, self._now())
            except DataSourceError as e:
                stale = self.cache.peek(key)
                if stale is None:
                    raise
                print(f"[SymbolService] Rebuild of {key} failed, serving expired catalog: {e}")
                return stale
            self.builds += 1
            self.cache.put(key, result)
            return result

    def invalidate(self, exchange_symbol: str, master_symbol: str) -> bool:
        return self.cache.invalidate(catalog_cache_key(exchange_symbol, master_symbol))
