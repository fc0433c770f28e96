"""LocalCsvReferenceSource — streams a scrip master CSV from disk in chunks."""

from __future__ import annotations

import os
import time
from typing import Callable, Iterator

import pandas as pd

from core.config import REFERENCE_CHUNK_SIZE, REFERENCE_READ_TIMEOUT
from core.exceptions import DataSourceError
from fetchers.base import ReferenceSource


class LocalCsvReferenceSource(ReferenceSource):
    """
    Reads one segment's Index_Derivatives CSV.

    Every column is read as text (no NA coercion) so Token, Strike and Expiry
    reach the catalog exactly as they appear in the file. The read aborts
    with DataSourceError once `read_timeout` seconds have elapsed.
    """

    def __init__(
        self,
        path:         str,
        segment:      str = "",
        chunk_size:   int = REFERENCE_CHUNK_SIZE,
        read_timeout: float = REFERENCE_READ_TIMEOUT,
        clock:        Callable[[], float] = time.monotonic,
    ):
        self.path         = path
        self.segment      = segment
        self.chunk_size   = chunk_size
        self.read_timeout = read_timeout
        self._clock       = clock

    def iter_chunks(self) -> Iterator[pd.DataFrame]:
        if not os.path.exists(self.path):
            raise DataSourceError(f"Reference file not found: {self.path}")

        started = self._clock()
        try:
            reader = pd.read_csv(
                self.path,
                dtype=str,
                keep_default_na=False,
                chunksize=self.chunk_size,
            )
            with reader:
                for chunk in reader:
                    if self._clock() - started > self.read_timeout:
                        raise DataSourceError(
                            f"Reading {self.path} exceeded {self.read_timeout}s"
                        )
                    chunk.columns = [str(c).strip() for c in chunk.columns]
                    yield self._validate_columns(chunk)
        except DataSourceError:
            raise
        except pd.errors.EmptyDataError as e:
            raise DataSourceError(f"Reference file is empty: {self.path}") from e
        except (pd.errors.ParserError, UnicodeDecodeError, OSError) as e:
            raise DataSourceError(f"Failed to parse {self.path}: {e}") from e

    def __repr__(self) -> str:
        return f"<LocalCsvReferenceSource {self.segment or '?'} {self.path}>"
