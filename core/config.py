"""Central configuration — all magic constants live here."""

import os

# ── Flattrade endpoints ──────────────────────────────────────────────────────
FLATTRADE_AUTH_HOST   = "https://authapi.flattrade.in"
FLATTRADE_TOKEN_URL   = f"{FLATTRADE_AUTH_HOST}/trade/apitoken"
FLATTRADE_PICONNECT   = "https://piconnect.flattrade.in/PiConnectTP"
FLATTRADE_SCRIP_ROOT  = "https://flattrade.s3.ap-south-1.amazonaws.com/scripmaster"

# ── Reference (scrip master) datasets per exchange segment ───────────────────
SYMBOLS_DIR: str = os.getenv("SYMBOLS_DIR", "symbols")

REFERENCE_FILES: dict[str, str] = {
    "NFO": "Nfo_Index_Derivatives.csv",
    "BFO": "Bfo_Index_Derivatives.csv",
}
DEFAULT_SEGMENT = "NFO"
# true: unknown segments are rejected (HTTP 400) instead of served from DEFAULT_SEGMENT
STRICT_SEGMENTS: bool = os.getenv("STRICT_SEGMENTS", "false").strip().lower() in ("1", "true", "yes", "on")

REFERENCE_COLUMNS: tuple[str, ...] = (
    "Symbol", "Exchange", "Tradingsymbol", "Token", "Expiry", "Strike", "Optiontype",
)
CALL_OPTION = "CE"
PUT_OPTION  = "PE"
EXPIRY_FORMAT = "%d-%b-%Y"            # e.g. 25-Dec-2025

REFERENCE_CHUNK_SIZE    = 20_000      # rows per streamed chunk
REFERENCE_READ_TIMEOUT  = float(os.getenv("REFERENCE_READ_TIMEOUT", "30"))   # seconds
REFERENCE_MAX_AGE       = 86400       # re-download scrip master after 24h

# ── Symbol cache ─────────────────────────────────────────────────────────────
SYMBOL_CACHE_TTL = int(os.getenv("SYMBOL_CACHE_TTL", str(4 * 60 * 60)))   # seconds

# ── Outbound HTTP ────────────────────────────────────────────────────────────
HTTP_TIMEOUT                = 15      # seconds
FLATTRADE_RATE_LIMIT_CALLS  = 10
FLATTRADE_RATE_LIMIT_PERIOD = 1.0     # seconds

# ── Exchange timezone (used for "today" when filtering expiries) ─────────────
EXCHANGE_TZ = "Asia/Kolkata"

# ── Server ───────────────────────────────────────────────────────────────────
DEFAULT_PORT = 8010
