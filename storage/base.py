"""
ResultCache (Strategy Pattern)
------------------------------
Abstract interface for holding built catalogs between requests.
Concrete implementation: TTLResultCache (in-process, per-entry deadline).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

V = TypeVar("V")


class ResultCache(ABC, Generic[V]):
    """Abstract key → value cache with time-based expiry."""

    @abstractmethod
    def get(self, key: str) -> Optional[V]:
        """Return the live value for key, or None if absent/expired."""

    @abstractmethod
    def peek(self, key: str) -> Optional[V]:
        """Return the last stored value for key, expired or not."""

    @abstractmethod
    def put(self, key: str, value: V, ttl: Optional[float] = None) -> None:
        """Store value under key, replacing any previous entry."""

    @abstractmethod
    def invalidate(self, key: str) -> bool:
        """Drop key; return True if an entry was removed."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every entry."""
