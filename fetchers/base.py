"""
ReferenceSource
---------------
Provides:
  • Abstract iter_chunks() — streams the scrip master as DataFrames whose
    required columns are all text.
  • Shared _validate_columns() used by every concrete source.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator

import pandas as pd

from core.config import REFERENCE_COLUMNS
from core.exceptions import DataSourceError


class ReferenceSource(ABC):
    """Abstract base; subclasses implement iter_chunks()."""

    #: segment label used in log lines, e.g. 'NFO'
    segment: str = ""

    # ── Unified interface ────────────────────────────────────────────────────
    @abstractmethod
    def iter_chunks(self) -> Iterator[pd.DataFrame]:
        """Yield consecutive row chunks; raise DataSourceError on failure."""

    # ── Shared helpers ───────────────────────────────────────────────────────
    def _validate_columns(self, df: pd.DataFrame) -> pd.DataFrame:
        missing = [c for c in REFERENCE_COLUMNS if c not in df.columns]
        if missing:
            raise DataSourceError(f"{self!r} is missing required columns: {missing}")
        return df[list(REFERENCE_COLUMNS)]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.segment or '?'}>"


class FrameReferenceSource(ReferenceSource):
    """In-memory source backed by a DataFrame (or list of row dicts)."""

    def __init__(self, rows, segment: str = ""):
        df = rows if isinstance(rows, pd.DataFrame) else pd.DataFrame(list(rows))
        self._df     = df.astype(str) if not df.empty else df
        self.segment = segment

    def iter_chunks(self) -> Iterator[pd.DataFrame]:
        if self._df.empty:
            return
        yield self._validate_columns(self._df)
