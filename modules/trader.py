# modules/trader.py
"""
Order execution against ``POST /api/v3/order``.

One call to :meth:`OrderExecutor.submit` is one signed HTTP request and one
:class:`~models.order_result.OrderResult`.  There are no retries and no
de-duplication here: re-submitting the same ``OrderRequest`` produces a new
timestamp, a new signature and a genuinely new order at the exchange.
"""
import asyncio
import logging
from typing import Callable, Optional

import requests
from pydantic import ValidationError

from models.order import (
    ExchangeError,
    OrderConfirmation,
    OrderRequest,
    SignedOrderRequest,
)
from models.order_result import Accepted, OrderResult, Rejected, TransportFailure
from utils.config_manager import ExchangeConfig
from utils.signing import RequestSigner, canonical_query, stamp

ORDER_ENDPOINT = "/api/v3/order"
API_KEY_HEADER = "X-MBX-APIKEY"


class OrderExecutor:
    def __init__(
        self,
        config: ExchangeConfig,
        signer: Optional[RequestSigner] = None,
        *,
        clock: Callable[[], int] = stamp,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._signer = signer or RequestSigner(config.api_secret)
        self._clock = clock
        self.logger = logger or logging.getLogger(self.__class__.__name__)

    @property
    def order_url(self) -> str:
        return self._config.order_base_url + ORDER_ENDPOINT

    def sign_request(self, request: OrderRequest) -> SignedOrderRequest:
        """Stamp ``request`` with the current time and sign it."""
        request.validate()
        timestamp = self._clock()
        query = canonical_query(request, timestamp, self._config.recv_window)
        return SignedOrderRequest(
            request=request,
            timestamp=timestamp,
            recv_window=self._config.recv_window,
            query=query,
            signature=self._signer.sign(query),
        )

    def submit(self, request: OrderRequest) -> OrderResult:
        """Send ``request`` once and classify the answer.

        Raises ``InvalidRequest`` before any network call if the LIMIT/MARKET
        field rules are broken; every other outcome is returned.
        """
        signed = self.sign_request(request)
        url = f"{self.order_url}?{signed.url_query}"

        self.logger.info(
            "📤 Entering order: %s %s %s @ %s",
            request.side.value, request.quantity, request.symbol, request.type.value,
        )
        try:
            resp = requests.post(
                url,
                headers={API_KEY_HEADER: self._config.api_key},
                timeout=self._config.request_timeout,
            )
        except requests.RequestException as exc:
            self.logger.error("💥 Order transport failure for %s: %s", request.symbol, exc)
            return TransportFailure(message=str(exc) or exc.__class__.__name__, cause=exc)

        self.logger.debug("Binance HTTP=%s body=%s", resp.status_code, resp.text)
        return self._classify(resp.status_code, resp.text)

    async def submit_async(self, request: OrderRequest) -> OrderResult:
        """Run :meth:`submit` on a worker thread so the event loop keeps streaming."""
        return await asyncio.to_thread(self.submit, request)

    # -------------------------------------------------------------- #
    def _classify(self, status_code: int, body: str) -> OrderResult:
        if 200 <= status_code < 300:
            try:
                ok = OrderConfirmation.model_validate_json(body)
            except ValidationError as exc:
                self.logger.error("⚠️ Malformed order confirmation (HTTP %s): %s", status_code, body)
                return TransportFailure(
                    message=f"malformed success response (HTTP {status_code})", cause=exc
                )
            self.logger.info("✅ ORDER PLACED! ID: %s Status: %s", ok.order_id, ok.status)
            return Accepted(
                order_id=ok.order_id,
                status=ok.status,
                raw=ok.model_dump(by_alias=True),
            )

        try:
            err = ExchangeError.model_validate_json(body)
        except ValidationError as exc:
            self.logger.error("⚠️ Unreadable error body (HTTP %s): %s", status_code, body)
            return TransportFailure(
                message=f"unreadable error response (HTTP {status_code})", cause=exc
            )
        self.logger.error(
            "⛔ ORDER REJECTED! HTTP=%s Code: %s Msg: %s", status_code, err.code, err.msg
        )
        return Rejected(code=err.code, message=err.msg, http_status=status_code)
