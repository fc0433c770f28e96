"""
ReferenceSourceFactory
----------------------
Selects the scrip master dataset for an exchange segment.

Decision table
──────────────────────────────────────────────────────────
segment == 'BFO'        → Bfo_Index_Derivatives.csv
segment == 'NFO'        → Nfo_Index_Derivatives.csv
anything else, strict   → UnknownSegmentError
anything else           → DEFAULT_SEGMENT dataset (logged)
──────────────────────────────────────────────────────────
"""

from __future__ import annotations

import os
from typing import Optional

from core.config import DEFAULT_SEGMENT, REFERENCE_FILES, SYMBOLS_DIR
from core.exceptions import UnknownSegmentError
from fetchers.base import ReferenceSource
from fetchers.local import LocalCsvReferenceSource


class ReferenceSourceFactory:
    """Factory — produce the reference source for a given exchange segment."""

    def __init__(
        self,
        symbols_dir:     Optional[str] = None,
        files:           Optional[dict[str, str]] = None,
        default_segment: str = DEFAULT_SEGMENT,
        strict:          bool = False,
    ):
        self.symbols_dir     = symbols_dir or SYMBOLS_DIR
        self.files           = dict(files or REFERENCE_FILES)
        self.default_segment = default_segment
        self.strict          = strict
        if default_segment not in self.files:
            raise UnknownSegmentError(f"Default segment {default_segment!r} has no dataset")

    def resolve_segment(self, exchange_symbol: str) -> str:
        """Map a requested exchange to a registered segment id."""
        if exchange_symbol in self.files:
            return exchange_symbol
        if self.strict:
            raise UnknownSegmentError(
                f"No reference dataset for segment {exchange_symbol!r}; "
                f"known: {', '.join(self.files)}"
            )
        print(f"[SourceFactory] Unknown segment {exchange_symbol!r} -> default {self.default_segment}")
        return self.default_segment

    def path_for(self, segment: str) -> str:
        return os.path.join(self.symbols_dir, self.files[segment])

    def create(self, exchange_symbol: str) -> ReferenceSource:
        segment = self.resolve_segment(exchange_symbol)
        return LocalCsvReferenceSource(self.path_for(segment), segment=segment)
