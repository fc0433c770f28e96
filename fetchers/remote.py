"""
Scrip master download
---------------------
Keeps the local Index_Derivatives CSVs fresh. A file younger than
REFERENCE_MAX_AGE is reused; otherwise it is downloaded from Flattrade's
S3 bucket and swapped in atomically so a concurrent reader never sees a
half-written file.
"""

from __future__ import annotations

import os
import tempfile
import time
from typing import Optional

import requests

from core.config import FLATTRADE_SCRIP_ROOT, HTTP_TIMEOUT, REFERENCE_FILES, REFERENCE_MAX_AGE, SYMBOLS_DIR
from core.exceptions import DataSourceError


def scrip_master_url(segment: str) -> str:
    return f"{FLATTRADE_SCRIP_ROOT}/{REFERENCE_FILES[segment]}"


def is_fresh(path: str, max_age: float = REFERENCE_MAX_AGE) -> bool:
    return os.path.exists(path) and (time.time() - os.path.getmtime(path)) < max_age


def refresh_reference_file(
    segment:     str,
    symbols_dir: Optional[str] = None,
    max_age:     float = REFERENCE_MAX_AGE,
    session:     Optional[requests.Session] = None,
) -> str:
    """Download the segment's scrip master unless a fresh copy exists; return its path."""
    if segment not in REFERENCE_FILES:
        raise DataSourceError(f"No scrip master registered for segment {segment!r}")

    symbols_dir = symbols_dir or SYMBOLS_DIR
    os.makedirs(symbols_dir, exist_ok=True)
    path = os.path.join(symbols_dir, REFERENCE_FILES[segment])

    if is_fresh(path, max_age):
        print(f"[ScripMaster] Using cached {segment} scrip master.")
        return path

    url = scrip_master_url(segment)
    print(f"[ScripMaster] Downloading {segment} scrip master from {url} ...")
    http = session or requests
    try:
        r = http.get(url, timeout=HTTP_TIMEOUT)
        r.raise_for_status()
    except requests.RequestException as e:
        raise DataSourceError(f"Failed to download {segment} scrip master: {e}") from e

    fd, tmp_path = tempfile.mkstemp(dir=symbols_dir, suffix=".part")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(r.content)
        os.replace(tmp_path, path)
    except OSError as e:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise DataSourceError(f"Failed to write {path}: {e}") from e

    print(f"[ScripMaster] Saved {len(r.content)} bytes -> {path}")
    return path


def refresh_all(symbols_dir: Optional[str] = None) -> dict[str, str]:
    """Refresh every registered segment; failures are reported, not raised."""
    paths: dict[str, str] = {}
    for segment in REFERENCE_FILES:
        try:
            paths[segment] = refresh_reference_file(segment, symbols_dir)
        except DataSourceError as e:
            print(f"[ScripMaster] {segment} refresh failed: {e}")
    return paths
