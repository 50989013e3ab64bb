"""API-backed random sources.

Each source exposes ``fetch(count, decimal_places)`` returning ``count`` floats
in [0,1), or raising :class:`FetchFailedError`. Sources are blocking; the
supply cache runs them off the draw path.
"""
from __future__ import annotations
import time
from numbers import Real
from typing import Protocol, runtime_checkable

import requests

from .exceptions import FetchFailedError, MalformedResponseError, RandomOrgAPIError

RANDOM_ORG_ENDPOINT = "https://api.random.org/json-rpc/4/invoke"
ANU_QRNG_ENDPOINT = "https://qrng.anu.edu.au/API/jsonI.php"

# random.org hints keyed by HTTP status / JSON-RPC code
_RANDOM_ORG_HINTS = {
    400: "invalid request parameters",
    401: "authentication failed, check the API key",
    402: "quota exhausted (bitsLeft or requestsLeft)",
    403: "key not permitted for this request",
    413: "request too large, lower the cache size",
    429: "too many requests, honour advisoryDelay",
    503: "service temporarily unavailable",
    -32600: "malformed JSON-RPC request",
    -32601: "unknown JSON-RPC method",
    -32602: "invalid JSON-RPC parameters",
    -32603: "JSON-RPC internal error",
}


@runtime_checkable
class RandomSource(Protocol):
    name: str

    @property
    def has_credential(self) -> bool: ...

    def fetch(self, count: int, decimal_places: int) -> list[float]: ...


def check_batch(data, count: int) -> list[float]:
    if not isinstance(data, list) or len(data) != count:
        got = len(data) if isinstance(data, list) else type(data).__name__
        raise MalformedResponseError(f"expected {count} values, got {got}")
    values = []
    for v in data:
        if isinstance(v, bool) or not isinstance(v, Real) or not 0.0 <= v < 1.0:
            raise MalformedResponseError(f"value out of range [0,1): {v!r}")
        values.append(float(v))
    return values


class RandomOrgSource:
    """random.org JSON-RPC client (``generateDecimalFractions``).

    Quota fields from the last successful response are kept in
    ``bits_left``, ``requests_left`` and ``advisory_delay`` (ms).
    """
    name = "random.org"

    def __init__(self, api_key: str | None, session: requests.Session | None = None, timeout: float = 10):
        self.api_key = api_key
        self.timeout = timeout
        self._session = session or requests.Session()
        self.bits_left = None
        self.requests_left = None
        self.advisory_delay = None

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def _rpc(self, method: str, params: dict) -> dict:
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": {"apiKey": self.api_key, **params},
            "id": int(time.time() * 1000),
        }
        try:
            r = self._session.post(RANDOM_ORG_ENDPOINT, json=payload, timeout=self.timeout)
            r.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise RandomOrgAPIError(status, _RANDOM_ORG_HINTS.get(status, str(e))) from e
        except requests.RequestException as e:
            raise FetchFailedError(f"could not reach random.org: {e}") from e
        try:
            js = r.json()
        except ValueError as e:
            raise MalformedResponseError("random.org response is not valid JSON") from e

        if not isinstance(js, dict):
            raise MalformedResponseError("random.org response is not a JSON object")
        err = js.get("error")
        if err:
            if not isinstance(err, dict):
                raise RandomOrgAPIError(None, str(err))
            code = err.get("code")
            data = err.get("data")
            raise RandomOrgAPIError(code, _RANDOM_ORG_HINTS.get(code, err.get("message", "")),
                                    data if isinstance(data, dict) else None)
        result = js.get("result")
        if not isinstance(result, dict):
            raise MalformedResponseError("random.org response has no result")
        return result

    def fetch(self, count: int, decimal_places: int) -> list[float]:
        result = self._rpc("generateDecimalFractions", {"n": count, "decimalPlaces": decimal_places})
        random = result.get("random")
        values = check_batch(random.get("data") if isinstance(random, dict) else None, count)
        self.bits_left = result.get("bitsLeft")
        self.requests_left = result.get("requestsLeft")
        self.advisory_delay = result.get("advisoryDelay")
        return values


class AnuQrngSource:
    """ANU quantum RNG (uint16 samples scaled to [0,1)). No key required."""
    name = "ANU QRNG"

    def __init__(self, session: requests.Session | None = None, timeout: float = 10):
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def has_credential(self) -> bool:
        return True

    def fetch(self, count: int, decimal_places: int) -> list[float]:
        try:
            r = self._session.get(ANU_QRNG_ENDPOINT, params={"length": count, "type": "uint16"},
                                  timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            raise FetchFailedError(f"could not reach ANU QRNG: {e}") from e
        try:
            js = r.json()
        except ValueError as e:
            raise MalformedResponseError("ANU QRNG response is not valid JSON") from e
        if not isinstance(js, dict) or not js.get("success", False):
            raise FetchFailedError("ANU QRNG reported failure")
        data = js.get("data")
        if not isinstance(data, list) or not all(isinstance(v, int) and 0 <= v < 65536 for v in data):
            raise MalformedResponseError("ANU QRNG data is not a list of uint16")
        # scale 0..65535 to [0,1); rounding can reach 1.0, so cap below it
        top = 1.0 - 10 ** -decimal_places
        return check_batch([min(round(v / 65536.0, decimal_places), top) for v in data], count)
