"""
Expiry ladder
-------------
Turns the distinct expiry strings seen during a scan into the ladder shown
to the user: past dates dropped, today kept, ascending, original text kept.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable, Optional

from core.config import EXPIRY_FORMAT
from core.exceptions import ExpiryParseError
from core.utils import ist_now


def parse_expiry(expiry: str) -> date:
    """Parse 'DD-Mon-YYYY' into a date; raises ExpiryParseError otherwise."""
    try:
        return datetime.strptime(str(expiry).strip(), EXPIRY_FORMAT).date()
    except (TypeError, ValueError) as e:
        raise ExpiryParseError(f"Unrecognised expiry {expiry!r}: {e}") from e


def filter_and_sort_expiries(
    distinct_expiries: Iterable[str],
    reference_now:     Optional[datetime] = None,
) -> list[str]:
    """
    Keep expiries whose calendar date is on or after reference_now's date,
    ordered by date. Values that do not parse are skipped.
    """
    today = (reference_now or ist_now()).date()

    dated: list[tuple[date, str]] = []
    skipped: list[str] = []
    for raw in set(distinct_expiries):
        try:
            d = parse_expiry(raw)
        except ExpiryParseError:
            skipped.append(raw)
            continue
        if d >= today:
            dated.append((d, raw))

    if skipped:
        print(f"[ExpiryLadder] Skipped {len(skipped)} unparseable expiries: {sorted(map(str, skipped))[:5]}")

    dated.sort()
    return [raw for _, raw in dated]
