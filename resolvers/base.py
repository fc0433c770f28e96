"""Symbol catalog data model shared by the builder, the cache and the routes."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class StrikeEntry:
    """One option contract as sent to the front-end (all fields left as text)."""
    trading_symbol: str
    security_id:    str          # instrument token
    expiry_date:    str          # original unparsed expiry, e.g. "25-Dec-2025"
    strike_price:   str          # original unparsed strike, e.g. "24500"

    def to_dict(self) -> dict[str, str]:
        return {
            "tradingSymbol": self.trading_symbol,
            "securityId":    self.security_id,
            "expiryDate":    self.expiry_date,
            "strikePrice":   self.strike_price,
        }


@dataclass(frozen=True)
class CatalogResult:
    """
    Call/put strike ladders plus the expiry ladder for one
    (exchange, underlying) pair. Built once per cache miss and never mutated.
    """
    call_strikes: tuple[StrikeEntry, ...] = field(default_factory=tuple)
    put_strikes:  tuple[StrikeEntry, ...] = field(default_factory=tuple)
    expiry_dates: tuple[str, ...]         = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not (self.call_strikes or self.put_strikes or self.expiry_dates)

    def to_dict(self) -> dict[str, list]:
        return {
            "callStrikes": [s.to_dict() for s in self.call_strikes],
            "putStrikes":  [s.to_dict() for s in self.put_strikes],
            "expiryDates": list(self.expiry_dates),
        }

    def __repr__(self) -> str:
        return (f"<CatalogResult calls={len(self.call_strikes)} "
                f"puts={len(self.put_strikes)} expiries={len(self.expiry_dates)}>")
