"""Gateway routes — all /flattrade API endpoints."""

from __future__ import annotations

from datetime import datetime

from flask import Response, current_app, jsonify, request

from gateway import app
from core.exceptions import BrokerRequestError, ConfigurationError, DataSourceError, UnknownSegmentError

PREFIX = "/flattrade"

# Headers that must not be copied between the two legs of the passthrough
_HOP_BY_HOP = {
    "connection", "content-encoding", "content-length", "host", "keep-alive",
    "proxy-authenticate", "proxy-authorization", "te", "trailers",
    "transfer-encoding", "upgrade",
}


def _client():
    return current_app.extensions["flattrade_client"]


def _credentials():
    return current_app.extensions["credential_store"]


def _symbols():
    return current_app.extensions["symbol_service"]


def _body() -> dict:
    """JSON body if present, otherwise the submitted form."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def _token_and_client():
    return request.args.get("FLATTRADE_API_TOKEN"), request.args.get("FLATTRADE_CLIENT_ID")


def _broker_failure(message: str, e: BrokerRequestError):
    print(f"[API] {message}: {e.details}")
    return jsonify({"message": message, "error": str(e), "details": e.details}), 500


def _stamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


# ── Auth passthrough ──────────────────────────────────────────────────────────

@app.route(f"{PREFIX}/flattradeApi/<path:path>",
           methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"])
def flattrade_api_passthrough(path):
    headers = {k: v for k, v in request.headers.items() if k.lower() not in _HOP_BY_HOP}
    try:
        upstream = _client().passthrough(
            request.method, path,
            params=request.args.to_dict(flat=False),
            data=request.get_data(),
            headers=headers,
        )
    except BrokerRequestError as e:
        return _broker_failure("Flattrade auth host unreachable", e)

    out_headers = [(k, v) for k, v in upstream.headers.items() if k.lower() not in _HOP_BY_HOP]
    return Response(upstream.content, status=upstream.status_code, headers=out_headers)


@app.route(f"{PREFIX}/generateToken", methods=["POST"])
def generate_token():
    code = _body().get("code")
    if not code:
        return jsonify({"message": "Request code is missing from front-end."}), 400
    try:
        return jsonify(_client().generate_token(code))
    except ConfigurationError as e:
        return jsonify({"message": str(e)}), 500
    except BrokerRequestError as e:
        print(f"[API] Error in generateToken: {e}")
        return jsonify({"message": "Error generating token", "error": str(e)}), 500


# ── Reference data ────────────────────────────────────────────────────────────

@app.route(f"{PREFIX}/scrip-master")
def scrip_master():
    try:
        csv_text = _client().fetch_scrip_master()
    except BrokerRequestError as e:
        print(f"[API] Error fetching scrip master: {e}")
        return jsonify({"error": "Failed to fetch scrip master"}), 500
    return Response(csv_text, mimetype="text/csv")


@app.route(f"{PREFIX}/symbols")
def get_symbols():
    exchange_symbol = request.args.get("exchangeSymbol")
    master_symbol   = request.args.get("masterSymbol")
    try:
        result = _symbols().lookup(exchange_symbol, master_symbol)
    except UnknownSegmentError as e:
        return jsonify({"message": str(e)}), 400
    except DataSourceError as e:
        print(f"[API] Error processing Flattrade CSV file: {e}")
        return jsonify({"message": "Failed to process Flattrade CSV file"}), 500
    return jsonify(result.to_dict())


@app.route(f"{PREFIX}/option-greek", methods=["POST"])
def option_greek():
    body  = _body()
    jdata = body.get("jData")
    jkey  = body.get("jKey")
    if not jdata:
        print("[API] jData is missing from the request body.")
        return jsonify({"error": "jData is Missing from request body"}), 400
    if not jkey:
        print("[API] jKey is missing from the request body.")
        return jsonify({"error": "jKey is Missing from request body"}), 400
    try:
        return jsonify(_client().option_greek(jdata, jkey))
    except BrokerRequestError as e:
        print(f"[API] Error in option-greek proxy: {e.details}")
        return jsonify({"error": "Failed to fetch from Flattrade API", "details": e.details}), 500


# ── Health ────────────────────────────────────────────────────────────────────

@app.route(f"{PREFIX}/test", methods=["GET", "HEAD"])
def router_test():
    print("[API] Test route accessed" + (" (HEAD)" if request.method == "HEAD" else ""))
    if request.method == "HEAD":
        return "", 200
    return jsonify({"message": "Flattrade router is working"}), 200


# ── Session credentials for the websocket client ──────────────────────────────

@app.route(f"{PREFIX}/setCredentials", methods=["POST"])
def set_credentials():
    body = _body()
    _credentials().set(body.get("usersession"), body.get("userid"))
    print(f"[API] {_stamp()}  Updated Flattrade credentials")
    return jsonify({"message": "Flattrade Credentials updated successfully"})


@app.route(f"{PREFIX}/websocketData")
def websocket_data():
    creds = _credentials().get()
    print(f"[API] {_stamp()}  Sending Flattrade websocket data")
    return jsonify(creds.to_dict())


# ── Account ───────────────────────────────────────────────────────────────────

@app.route(f"{PREFIX}/fundLimit", methods=["POST"])
def fund_limit():
    jkey, client_id = _token_and_client()
    if not jkey or not client_id:
        return jsonify({"message": "API token or Client ID is missing."}), 400
    try:
        return jsonify(_client().fund_limits(jkey, client_id))
    except BrokerRequestError as e:
        return _broker_failure("Error fetching Flattrade fund limits", e)


@app.route(f"{PREFIX}/getOrdersAndTrades")
def get_orders_and_trades():
    jkey, client_id = _token_and_client()
    if not jkey or not client_id:
        return jsonify({"message": "Token or Client ID is missing."}), 400
    client = _client()
    try:
        order_book = client.order_book(jkey, client_id)
        trade_book = client.trade_book(jkey, client_id)
    except BrokerRequestError as e:
        return _broker_failure("Error fetching Flattrade orders and trades", e)
    return jsonify({"orderBook": order_book, "tradeBook": trade_book})


# ── Trading ───────────────────────────────────────────────────────────────────

@app.route(f"{PREFIX}/placeOrder", methods=["POST"])
def place_order():
    auth  = request.headers.get("Authorization", "")
    parts = auth.split(" ")
    jkey  = parts[1] if len(parts) > 1 else None
    if not jkey:
        return jsonify({"message": "Token is missing. Please generate a token first."}), 400

    order = _body()
    try:
        resp = _client().place_order(jkey, order)
    except BrokerRequestError as e:
        return _broker_failure("Error placing Flattrade Place order", e)
    print(f"[API] Flattrade Order Place details: {order} -> {resp}")
    return jsonify(resp)


@app.route(f"{PREFIX}/cancelOrder", methods=["POST"])
def cancel_order():
    body = _body()
    jkey = request.args.get("FLATTRADE_API_TOKEN")
    if not jkey:
        return jsonify({"message": "Token is missing. Please generate a token first."}), 400

    norenordno = body.get("norenordno")
    try:
        resp = _client().cancel_order(jkey, norenordno, body.get("uid"))
    except BrokerRequestError as e:
        return _broker_failure("Error cancelling Flattrade order", e)
    print(f"[API] Flattrade Cancel Order: {norenordno} -> {resp}")
    return jsonify(resp)
