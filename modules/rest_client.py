"""
rest_client.py
--------------
Public market data over Binance REST: last price (/api/v3/ticker/price) and
recent trades (/api/v3/trades).  Failures are logged and reported as
``None`` / ``[]``; callers that poll simply try again next tick.
"""

from __future__ import annotations

import asyncio
import logging
import statistics
import time
from typing import Awaitable, Callable, Dict, List, Optional, Union

import aiohttp
from pydantic import ValidationError

from models.trade import Trade
from utils.config_manager import ExchangeConfig

TICKER_ENDPOINT = "/api/v3/ticker/price"
TRADES_ENDPOINT = "/api/v3/trades"

PriceCallback = Callable[[str, str], Union[Awaitable[None], None]]


class MarketDataClient:
    """Asynchronous client for public Binance REST market data."""

    def __init__(
        self,
        config: ExchangeConfig,
        logger: Optional[logging.Logger] = None,
        *,
        timeout: Optional[float] = None,
    ) -> None:
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.base_url = config.base_url.rstrip("/")
        self.timeout = aiohttp.ClientTimeout(total=timeout or config.request_timeout)

        self.metrics: Dict[str, object] = {
            "requests_sent": 0,
            "errors": 0,
            "latencies": [],
        }

    # -------------------------------------------------------------------- #
    async def _get_json(self, session: aiohttp.ClientSession, endpoint: str, params: Dict):
        url = self.base_url + endpoint
        t0 = time.time()
        async with session.get(url, params=params, timeout=self.timeout) as resp:
            self.metrics["requests_sent"] += 1
            if resp.status != 200:
                body = await resp.text()
                raise aiohttp.ClientResponseError(
                    resp.request_info, resp.history, status=resp.status, message=body
                )
            data = await resp.json()
        latency = time.time() - t0
        self.metrics["latencies"].append(latency)
        self.logger.debug("🐢 REST poll latency: %.0f ms | %s", latency * 1000, endpoint)
        return data

    async def fetch_price(self, session: aiohttp.ClientSession, symbol: str) -> Optional[str]:
        """Return the last traded price as the exchange formats it, e.g. ``"95000.50"``."""
        try:
            data = await self._get_json(session, TICKER_ENDPOINT, {"symbol": symbol.upper()})
            return str(data["price"])
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError, KeyError, TypeError) as exc:
            self.metrics["errors"] += 1
            self.logger.warning("❌ Failed to fetch price for %s: %s", symbol, exc)
            return None

    async def fetch_recent_trades(
        self, session: aiohttp.ClientSession, symbol: str, limit: int = 10
    ) -> List[Trade]:
        pair = symbol.upper()
        try:
            rows = await self._get_json(session, TRADES_ENDPOINT, {"limit": limit, "symbol": pair})
            trades = [Trade.model_validate(row) for row in rows]
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError, TypeError, ValidationError) as exc:
            self.metrics["errors"] += 1
            self.logger.warning("❌ Failed to fetch trades for %s: %s", symbol, exc)
            return []
        return [t.model_copy(update={"pair": pair}) for t in trades]

    # -------------------------------------------------------------------- #
    async def poll_price(
        self,
        symbol: str,
        callback: PriceCallback,
        *,
        interval: float = 1.0,
        iterations: Optional[int] = None,
    ) -> None:
        """Fetch the price every ``interval`` seconds and hand it to ``callback``."""
        count = 0
        async with aiohttp.ClientSession() as session:
            while iterations is None or count < iterations:
                price = await self.fetch_price(session, symbol)
                if price is not None:
                    res = callback(symbol, price)
                    if asyncio.iscoroutine(res):
                        await res
                count += 1
                if iterations is None or count < iterations:
                    await asyncio.sleep(interval)

    def log_metrics(self) -> None:
        latencies = self.metrics["latencies"]
        avg = statistics.mean(latencies) if latencies else 0
        self.logger.info(
            "📊 Requests: %s | Errors: %s | Avg latency: %.3fs",
            self.metrics["requests_sent"],
            self.metrics["errors"],
            avg,
        )
