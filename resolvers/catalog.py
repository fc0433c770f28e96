"""
Catalog builder
---------------
Scans one scrip master end-to-end for an (exchange, underlying) pair and
produces the call/put strike ladders and the expiry ladder.

Flow
----
1. Stream the reference source chunk by chunk.
2. Keep rows where Symbol == master_symbol and Exchange == exchange_symbol.
3. CE rows → call ladder, PE rows → put ladder, anything else → no ladder.
   Every kept row contributes its Expiry to the distinct-expiry set.
4. After the last chunk, sort both ladders by numeric strike and hand the
   expiries to the expiry ladder filter.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

import pandas as pd

from core.config import CALL_OPTION, PUT_OPTION
from fetchers.base import ReferenceSource
from resolvers.base import CatalogResult, StrikeEntry
from resolvers.expiry import filter_and_sort_expiries


def _select(chunk: pd.DataFrame, exchange_symbol, master_symbol) -> pd.DataFrame:
    return chunk[(chunk["Symbol"] == master_symbol) & (chunk["Exchange"] == exchange_symbol)]


def build_catalog(
    exchange_symbol: str,
    master_symbol:   str,
    source:          ReferenceSource,
    reference_now:   Optional[datetime] = None,
) -> CatalogResult:
    """
    Build the CatalogResult for (exchange_symbol, master_symbol).

    Raises DataSourceError (from the source) if the dataset cannot be read;
    a CE/PE row whose Strike is not numeric is skipped and counted.
    """
    calls: list[tuple[float, StrikeEntry]] = []
    puts:  list[tuple[float, StrikeEntry]] = []
    expiries: set[str] = set()
    malformed = 0

    for chunk in source.iter_chunks():
        rows = _select(chunk, exchange_symbol, master_symbol)
        if rows.empty:
            continue

        strikes   = pd.to_numeric(rows["Strike"].str.strip(), errors="coerce")
        is_option = rows["Optiontype"].isin([CALL_OPTION, PUT_OPTION])
        bad       = is_option & strikes.isna()
        malformed += int(bad.sum())

        for row, strike in zip(rows[~bad].itertuples(index=False), strikes[~bad]):
            entry = StrikeEntry(
                trading_symbol=row.Tradingsymbol,
                security_id=row.Token,
                expiry_date=row.Expiry,
                strike_price=row.Strike,
            )
            if row.Optiontype == CALL_OPTION:
                calls.append((float(strike), entry))
            elif row.Optiontype == PUT_OPTION:
                puts.append((float(strike), entry))
            expiries.add(row.Expiry)

    # list.sort is stable: equal strikes keep file order
    calls.sort(key=lambda t: t[0])
    puts.sort(key=lambda t: t[0])

    if malformed:
        print(f"[Catalog] Skipped {malformed} malformed rows for {exchange_symbol}_{master_symbol}")
    print(f"[Catalog] {exchange_symbol}_{master_symbol}: "
          f"{len(calls)} calls, {len(puts)} puts, {len(expiries)} expiries")

    return CatalogResult(
        call_strikes=tuple(e for _, e in calls),
        put_strikes=tuple(e for _, e in puts),
        expiry_dates=tuple(filter_and_sort_expiries(expiries, reference_now)),
    )
