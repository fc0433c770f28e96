"""
FlattradeClient
---------------
Provides:
  • Server-side token exchange (api secret never leaves the server).
  • PiConnect calls in Flattrade's form encoding: jData=<json>&jKey=<token>.
  • Scrip master download and a raw passthrough to the auth host.

Every outbound call shares one rate limiter and a fixed timeout; transport
failures and non-2xx responses raise BrokerRequestError.
"""

from __future__ import annotations

import json
import os
from typing import Any, Optional, Union

import requests

from core.config import (
    FLATTRADE_AUTH_HOST,
    FLATTRADE_PICONNECT,
    FLATTRADE_RATE_LIMIT_CALLS,
    FLATTRADE_RATE_LIMIT_PERIOD,
    FLATTRADE_TOKEN_URL,
    HTTP_TIMEOUT,
    REFERENCE_FILES,
)
from core.exceptions import BrokerRequestError, ConfigurationError
from core.rate_limiter import rate_limited
from core.utils import sha256_hex
from fetchers.remote import scrip_master_url

FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded"}
JSON_HEADERS = {"Content-Type": "application/json"}

_throttle = rate_limited(max_calls=FLATTRADE_RATE_LIMIT_CALLS, period=FLATTRADE_RATE_LIMIT_PERIOD)


def encode_jdata(jdata: Union[str, dict, list]) -> str:
    """Serialise jData the way the PiConnect API expects (compact JSON)."""
    if isinstance(jdata, str):
        return jdata
    return json.dumps(jdata, separators=(",", ":"))


def _error_details(response: Optional[requests.Response]) -> Any:
    if response is None:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class FlattradeClient:
    """Thin wrapper over requests for the Flattrade auth and PiConnect hosts."""

    def __init__(
        self,
        api_key:    Optional[str] = None,
        api_secret: Optional[str] = None,
        session:    Optional[requests.Session] = None,
        timeout:    float = HTTP_TIMEOUT,
    ):
        self._api_key    = api_key
        self._api_secret = api_secret
        self.session     = session or requests.Session()
        self.timeout     = timeout

    # ── Credentials ──────────────────────────────────────────────────────────
    @property
    def api_key(self) -> Optional[str]:
        return self._api_key or os.getenv("FLATTRADE_API_KEY")

    @property
    def api_secret(self) -> Optional[str]:
        return self._api_secret or os.getenv("FLATTRADE_API_SECRET")

    # ── Transport ────────────────────────────────────────────────────────────
    @_throttle
    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            r = self.session.request(method, url, timeout=self.timeout, **kwargs)
            r.raise_for_status()
            return r
        except requests.HTTPError as e:
            raise BrokerRequestError(
                str(e), status=e.response.status_code if e.response is not None else None,
                details=_error_details(e.response),
            ) from e
        except requests.RequestException as e:
            raise BrokerRequestError(str(e)) from e

    def _json(self, r: requests.Response) -> Any:
        try:
            return r.json()
        except ValueError as e:
            raise BrokerRequestError(f"Non-JSON response from {r.url}", status=r.status_code,
                                     details=r.text) from e

    def post_jdata(self, endpoint: str, jkey: str, jdata: Union[str, dict, list]) -> Any:
        """POST jData/jKey to PiConnectTP/<endpoint> and return the decoded JSON."""
        body = f"jData={encode_jdata(jdata)}&jKey={jkey}"
        r = self._send("POST", f"{FLATTRADE_PICONNECT}/{endpoint}", data=body, headers=FORM_HEADERS)
        return self._json(r)

    # ── Auth ─────────────────────────────────────────────────────────────────
    def generate_token(self, request_code: str) -> Any:
        api_key, api_secret = self.api_key, self.api_secret
        if not api_key or not api_secret:
            raise ConfigurationError("API Key or Secret is not configured on the server.")

        payload = {
            "api_key":      api_key,
            "request_code": request_code,
            "api_secret":   sha256_hex(api_key, request_code, api_secret),
        }
        r = self._send("POST", FLATTRADE_TOKEN_URL, json=payload, headers=JSON_HEADERS)
        return self._json(r)

    # ── Account / orders ─────────────────────────────────────────────────────
    def fund_limits(self, jkey: str, client_id: str) -> Any:
        return self.post_jdata("Limits", jkey, {"uid": client_id, "actid": client_id})

    def order_book(self, jkey: str, client_id: str) -> Any:
        return self.post_jdata("OrderBook", jkey, {"uid": client_id, "prd": "M"})

    def trade_book(self, jkey: str, client_id: str) -> Any:
        return self.post_jdata("TradeBook", jkey, {"uid": client_id, "actid": client_id})

    def place_order(self, jkey: str, order: dict) -> Any:
        return self.post_jdata("PlaceOrder", jkey, order)

    def cancel_order(self, jkey: str, norenordno: str, uid: str) -> Any:
        return self.post_jdata("CancelOrder", jkey, {"norenordno": norenordno, "uid": uid})

    def option_greek(self, jdata: Union[str, dict], jkey: str) -> Any:
        return self.post_jdata("GetOptionGreek", jkey, jdata)

    # ── Reference data / passthrough ─────────────────────────────────────────
    def fetch_scrip_master(self, segment: str = "NFO") -> str:
        if segment not in REFERENCE_FILES:
            raise BrokerRequestError(f"No scrip master for segment {segment!r}", status=400)
        return self._send("GET", scrip_master_url(segment)).text

    def passthrough(
        self,
        method:  str,
        path:    str,
        params:  Optional[dict] = None,
        data:    Optional[bytes] = None,
        headers: Optional[dict] = None,
    ) -> requests.Response:
        """Forward a request to the auth host as-is; upstream status codes are not raised."""
        url = f"{FLATTRADE_AUTH_HOST}/{path.lstrip('/')}"
        try:
            return self.session.request(method, url, params=params, data=data,
                                        headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise BrokerRequestError(str(e)) from e
