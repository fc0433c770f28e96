import hashlib
from datetime import datetime

import pytz

from core.config import EXCHANGE_TZ


def ist_now() -> datetime:
    """Returns current time in IST (required for cross-platform/cloud servers)."""
    return datetime.now(pytz.timezone(EXCHANGE_TZ))


def catalog_cache_key(exchange_symbol, master_symbol) -> str:
    """Cache key for one (exchange, underlying) catalog, e.g. 'NFO_NIFTY'."""
    return f"{exchange_symbol}_{master_symbol}"


def sha256_hex(*parts: str) -> str:
    """SHA-256 hex digest of the concatenated parts."""
    return hashlib.sha256("".join(parts).encode("utf-8")).hexdigest()
