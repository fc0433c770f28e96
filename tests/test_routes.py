from __future__ import annotations

from core.exceptions import BrokerRequestError, ConfigurationError, DataSourceError


# ── /symbols ─────────────────────────────────────────────────────────────────

def test_symbols_returns_ladders(client, counting_factory) -> None:
    resp = client.get("/flattrade/symbols?exchangeSymbol=NFO&masterSymbol=NIFTY")
    assert resp.status_code == 200
    data = resp.get_json()
    assert [s["strikePrice"] for s in data["callStrikes"]] == ["90", "100"]
    assert [s["strikePrice"] for s in data["putStrikes"]] == ["100"]
    assert data["expiryDates"] == ["01-Jan-2099"]
    assert data["putStrikes"][0] == {
        "tradingSymbol": "NIFTY01JAN99P100",
        "securityId":    "1002",
        "expiryDate":    "01-Jan-2099",
        "strikePrice":   "100",
    }


def test_symbols_second_call_uses_cache(client, counting_factory) -> None:
    first  = client.get("/flattrade/symbols?exchangeSymbol=NFO&masterSymbol=NIFTY").get_json()
    second = client.get("/flattrade/symbols?exchangeSymbol=NFO&masterSymbol=NIFTY").get_json()
    assert first == second
    assert counting_factory.calls == ["NFO"]


def test_symbols_missing_master_is_empty(client) -> None:
    resp = client.get("/flattrade/symbols?exchangeSymbol=NFO")
    assert resp.status_code == 200
    assert resp.get_json() == {"callStrikes": [], "putStrikes": [], "expiryDates": []}


def test_symbols_data_source_failure(client, symbol_service, monkeypatch) -> None:
    def boom(exchange_symbol):
        raise DataSourceError("Reference file not found: symbols/Nfo_Index_Derivatives.csv")

    monkeypatch.setattr(symbol_service.factory, "create", boom)
    resp = client.get("/flattrade/symbols?exchangeSymbol=NFO&masterSymbol=NIFTY")
    assert resp.status_code == 500
    assert resp.get_json() == {"message": "Failed to process Flattrade CSV file"}


def test_symbols_unknown_segment_rejected_when_strict(client, monkeypatch, tmp_path) -> None:
    from gateway import app
    from fetchers.factory import ReferenceSourceFactory
    from resolvers.symbol_service import SymbolCatalogService

    strict = SymbolCatalogService(factory=ReferenceSourceFactory(symbols_dir=str(tmp_path), strict=True))
    monkeypatch.setitem(app.extensions, "symbol_service", strict)
    resp = client.get("/flattrade/symbols?exchangeSymbol=MCX&masterSymbol=CRUDEOIL")
    assert resp.status_code == 400
    assert "MCX" in resp.get_json()["message"]
    assert strict.builds == 0


def test_app_factory_follows_strict_setting() -> None:
    from core.config import STRICT_SEGMENTS
    from gateway import app

    assert app.extensions["symbol_service"].factory.strict is STRICT_SEGMENTS


# ── health / credentials ─────────────────────────────────────────────────────

def test_router_test_get_and_head(client) -> None:
    assert client.get("/flattrade/test").get_json() == {"message": "Flattrade router is working"}
    head = client.head("/flattrade/test")
    assert head.status_code == 200
    assert head.data == b""


def test_websocket_data_empty_before_set(client) -> None:
    assert client.get("/flattrade/websocketData").get_json() == {"usersession": "", "userid": ""}


def test_set_then_read_credentials(client) -> None:
    resp = client.post("/flattrade/setCredentials", json={"usersession": "abc123", "userid": "FT1"})
    assert resp.get_json() == {"message": "Flattrade Credentials updated successfully"}
    assert client.get("/flattrade/websocketData").get_json() == {"usersession": "abc123", "userid": "FT1"}


# ── token / greeks ───────────────────────────────────────────────────────────

def test_generate_token_requires_code(client, fake_client) -> None:
    resp = client.post("/flattrade/generateToken", json={})
    assert resp.status_code == 400
    assert fake_client.calls == []


def test_generate_token_forwards(client, fake_client) -> None:
    resp = client.post("/flattrade/generateToken", json={"code": "REQ"})
    assert resp.status_code == 200
    assert fake_client.calls == [("generate_token", "REQ")]


def test_generate_token_unconfigured(client, fake_client) -> None:
    fake_client.error = ConfigurationError("API Key or Secret is not configured on the server.")
    resp = client.post("/flattrade/generateToken", json={"code": "REQ"})
    assert resp.status_code == 500
    assert "not configured" in resp.get_json()["message"]


def test_option_greek_validation(client) -> None:
    assert client.post("/flattrade/option-greek", json={"jKey": "T"}).get_json() == {
        "error": "jData is Missing from request body"}
    assert client.post("/flattrade/option-greek", json={"jData": "{}"}).get_json() == {
        "error": "jKey is Missing from request body"}


def test_option_greek_upstream_failure(client, fake_client) -> None:
    fake_client.error = BrokerRequestError("boom", status=500, details={"emsg": "down"})
    resp = client.post("/flattrade/option-greek", json={"jData": "{}", "jKey": "T"})
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Failed to fetch from Flattrade API", "details": {"emsg": "down"}}


def test_scrip_master_is_csv(client) -> None:
    resp = client.get("/flattrade/scrip-master")
    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert resp.data.startswith(b"Exchange,Token")


# ── account / orders ─────────────────────────────────────────────────────────

def test_fund_limit_requires_token_and_client(client, fake_client) -> None:
    assert client.post("/flattrade/fundLimit?FLATTRADE_API_TOKEN=T").status_code == 400
    resp = client.post("/flattrade/fundLimit?FLATTRADE_API_TOKEN=T&FLATTRADE_CLIENT_ID=FT1")
    assert resp.status_code == 200
    assert fake_client.calls == [("fund_limits", "T", "FT1")]


def test_orders_and_trades(client, fake_client) -> None:
    resp = client.get("/flattrade/getOrdersAndTrades?FLATTRADE_API_TOKEN=T&FLATTRADE_CLIENT_ID=FT1")
    data = resp.get_json()
    assert data["orderBook"]["call"] == "order_book"
    assert data["tradeBook"]["call"] == "trade_book"


def test_orders_and_trades_upstream_failure(client, fake_client) -> None:
    fake_client.error = BrokerRequestError("timeout")
    resp = client.get("/flattrade/getOrdersAndTrades?FLATTRADE_API_TOKEN=T&FLATTRADE_CLIENT_ID=FT1")
    assert resp.status_code == 500
    assert resp.get_json()["message"] == "Error fetching Flattrade orders and trades"


def test_place_order_uses_bearer_token(client, fake_client) -> None:
    assert client.post("/flattrade/placeOrder", data={"tsym": "X"}).status_code == 400

    resp = client.post("/flattrade/placeOrder", data={"tsym": "NIFTY25DEC25C24000", "qty": "75"},
                       headers={"Authorization": "Bearer TOKEN"})
    assert resp.status_code == 200
    assert fake_client.calls == [("place_order", "TOKEN", {"tsym": "NIFTY25DEC25C24000", "qty": "75"})]


def test_cancel_order(client, fake_client) -> None:
    assert client.post("/flattrade/cancelOrder", json={"norenordno": "1"}).status_code == 400
    resp = client.post("/flattrade/cancelOrder?FLATTRADE_API_TOKEN=T", json={"norenordno": "24", "uid": "FT1"})
    assert resp.status_code == 200
    assert fake_client.calls == [("cancel_order", "T", "24", "FT1")]


# ── auth host passthrough ────────────────────────────────────────────────────

def test_passthrough_relays_status_and_body(client, fake_client) -> None:
    resp = client.post("/flattrade/flattradeApi/trade/apitoken?x=1", json={"a": 1})
    assert resp.status_code == 202
    assert resp.get_json() == {"stat": "Ok"}
    assert "Transfer-Encoding" not in resp.headers
    assert fake_client.calls == [("passthrough", "POST", "trade/apitoken")]


def test_passthrough_unreachable(client, fake_client) -> None:
    fake_client.error = BrokerRequestError("connection refused")
    resp = client.get("/flattrade/flattradeApi/anything")
    assert resp.status_code == 500
