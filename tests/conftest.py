from __future__ import annotations

from pathlib import Path
from typing import Iterable

import pytest
import requests

from core.config import REFERENCE_COLUMNS
from fetchers.base import FrameReferenceSource, ReferenceSource
from resolvers.symbol_service import SymbolCatalogService
from storage.credentials import CredentialStore
from storage.memory_cache import TTLResultCache


def row(symbol, exchange, opt, strike, expiry, tsym=None, token=None) -> dict:
    return {
        "Symbol":        symbol,
        "Exchange":      exchange,
        "Tradingsymbol": tsym or f"{symbol}{expiry.replace('-', '')}{opt[:1]}{strike}",
        "Token":         token or f"{abs(hash((symbol, opt, strike, expiry))) % 100000}",
        "Expiry":        expiry,
        "Strike":        strike,
        "Optiontype":    opt,
    }


def write_reference_csv(path: Path, rows: Iterable[dict]) -> Path:
    lines = [",".join(REFERENCE_COLUMNS)]
    for r in rows:
        lines.append(",".join(str(r[c]) for c in REFERENCE_COLUMNS))
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class CountingFactory:
    """Stands in for ReferenceSourceFactory; counts how often a dataset is opened."""

    def __init__(self, rows_by_segment: dict[str, list[dict]]):
        self.rows_by_segment = rows_by_segment
        self.calls: list[str] = []

    def create(self, exchange_symbol: str) -> ReferenceSource:
        self.calls.append(exchange_symbol)
        segment = "BFO" if exchange_symbol == "BFO" else "NFO"
        return FrameReferenceSource(self.rows_by_segment.get(segment, []), segment=segment)


@pytest.fixture
def sample_rows() -> list[dict]:
    return [
        row("NIFTY", "NFO", "CE", "100", "01-Jan-2099", tsym="NIFTY01JAN99C100", token="1001"),
        row("NIFTY", "NFO", "PE", "100", "01-Jan-2099", tsym="NIFTY01JAN99P100", token="1002"),
        row("NIFTY", "NFO", "CE", "90",  "01-Jan-2099", tsym="NIFTY01JAN99C90",  token="1003"),
        row("BANKNIFTY", "NFO", "CE", "500", "01-Jan-2099", tsym="BANKNIFTY01JAN99C500", token="2001"),
    ]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def counting_factory(sample_rows) -> CountingFactory:
    bfo = [row("SENSEX", "BFO", "CE", "80000", "01-Jan-2099", token="3001"),
           row("NIFTY", "BFO", "CE", "100", "01-Jan-2099", token="3002")]
    return CountingFactory({"NFO": sample_rows, "BFO": bfo})


@pytest.fixture
def symbol_service(counting_factory, clock) -> SymbolCatalogService:
    return SymbolCatalogService(factory=counting_factory, cache=TTLResultCache(ttl=14400, clock=clock))


class FakeFlattradeClient:
    """Records calls made by the routes and returns canned payloads."""

    def __init__(self):
        self.calls: list[tuple] = []
        self.error = None

    def _record(self, name, *args):
        self.calls.append((name, *args))
        if self.error is not None:
            raise self.error
        return {"stat": "Ok", "call": name}

    def generate_token(self, code):
        return self._record("generate_token", code)

    def fund_limits(self, jkey, client_id):
        return self._record("fund_limits", jkey, client_id)

    def order_book(self, jkey, client_id):
        return self._record("order_book", jkey, client_id)

    def trade_book(self, jkey, client_id):
        return self._record("trade_book", jkey, client_id)

    def place_order(self, jkey, order):
        return self._record("place_order", jkey, order)

    def cancel_order(self, jkey, norenordno, uid):
        return self._record("cancel_order", jkey, norenordno, uid)

    def option_greek(self, jdata, jkey):
        return self._record("option_greek", jdata, jkey)

    def fetch_scrip_master(self, segment="NFO"):
        self._record("fetch_scrip_master", segment)
        return "Exchange,Token\nNFO,1\n"

    def passthrough(self, method, path, params=None, data=None, headers=None):
        self._record("passthrough", method, path)
        r = requests.Response()
        r.status_code = 202
        r._content = b'{"stat":"Ok"}'
        r.headers["Content-Type"] = "application/json"
        r.headers["Transfer-Encoding"] = "chunked"
        return r


@pytest.fixture
def fake_client() -> FakeFlattradeClient:
    return FakeFlattradeClient()


@pytest.fixture
def client(monkeypatch, symbol_service, fake_client):
    from gateway import app
    import gateway.routes  # noqa: F401

    monkeypatch.setitem(app.extensions, "symbol_service", symbol_service)
    monkeypatch.setitem(app.extensions, "credential_store", CredentialStore())
    monkeypatch.setitem(app.extensions, "flattrade_client", fake_client)
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c
