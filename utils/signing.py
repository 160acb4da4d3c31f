# -------------------------------------------------------------------
#  🔐  utils/signing.py  – canonical query + signature for authenticated
#  Binance REST calls.
# -------------------------------------------------------------------
"""Implements the HMAC SHA256 flow described in the Binance API docs:
   1. Concatenate the parameters *in the order they will be sent*.
   2. Join as key=value pairs with '&' (no re-encoding, no sorting).
   3. HmacSHA256(secret_key, query) → hex digest (lower-case).
   4. Append ``signature=<hex>`` as the last parameter.

The exchange recomputes the HMAC over the literal string it receives, so
the field order below is part of the wire contract."""
from __future__ import annotations
import hashlib, hmac, time
from typing import List, Optional, Tuple

from core.errors import ConfigurationError
from models.order import OrderRequest

DEFAULT_RECV_WINDOW = 5000
DEFAULT_RESP_TYPE = "FULL"
__all__ = [
    "stamp",
    "canonical_query",
    "generate_signature",
    "RequestSigner",
    "DEFAULT_RECV_WINDOW",
]


def stamp() -> int:
    """Server-accepted millisecond timestamp."""
    return int(time.time() * 1000)


def canonical_query(
    request: OrderRequest,
    timestamp: int,
    recv_window: int = DEFAULT_RECV_WINDOW,
    resp_type: str = DEFAULT_RESP_TYPE,
) -> str:
    """Return the order query string in its fixed, signed order."""
    pairs: List[Tuple[str, str]] = [
        ("symbol", request.symbol),
        ("side", request.side.value),
        ("type", request.type.value),
        ("quantity", request.quantity),
    ]
    if request.price is not None:
        pairs.append(("price", request.price))
    if request.time_in_force is not None:
        pairs.append(("timeInForce", request.time_in_force.value))
    pairs.append(("timestamp", str(timestamp)))
    pairs.append(("recvWindow", str(recv_window)))
    pairs.append(("newOrderRespType", resp_type))
    return "&".join(f"{k}={v}" for k, v in pairs)


def generate_signature(query: str, secret_key: str) -> str:
    """HMAC-SHA256 of ``query`` keyed by ``secret_key``, lower-case hex."""
    return hmac.new(secret_key.encode(), query.encode(), hashlib.sha256).hexdigest()


class RequestSigner:
    """Holds the API secret and signs query strings with it.

    The secret is checked here, at construction, so a misconfigured client
    fails before the first order attempt.
    """

    def __init__(self, secret_key: Optional[str]) -> None:
        if not secret_key or not secret_key.strip():
            raise ConfigurationError("api.secret is missing or empty")
        self._secret_key = secret_key

    def sign(self, query: str) -> str:
        return generate_signature(query, self._secret_key)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(secret_key=***)"
