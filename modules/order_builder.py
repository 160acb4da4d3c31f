"""
order_builder.py
----------------
Fluent builder with safe defaults for ``OrderRequest``.  Mostly used by
tests and scripts; production callers may build ``OrderRequest`` directly.
"""
from __future__ import annotations

from decimal import ROUND_DOWN, Decimal
from typing import Optional

from models.order import OrderRequest, OrderSide, OrderType, TimeInForce


def normalize_price(raw: str, decimals: int = 2) -> str:
    """Truncate ``raw`` to ``decimals`` places so it fits the symbol's tick size."""
    quantum = Decimal(1).scaleb(-decimals)
    return str(Decimal(raw).quantize(quantum, rounding=ROUND_DOWN))


class OrderRequestBuilder:
    def __init__(self) -> None:
        self._symbol = "BTCUSDT"
        self._side = OrderSide.BUY
        self._type = OrderType.MARKET
        self._quantity = "0.001"
        self._price: Optional[str] = None
        self._time_in_force: Optional[TimeInForce] = None

    # ---------------------------------------------------------------- #
    @classmethod
    def a_market_buy_order(cls) -> "OrderRequestBuilder":
        return cls()

    @classmethod
    def a_market_sell_order(cls) -> "OrderRequestBuilder":
        return cls().with_side(OrderSide.SELL)

    @classmethod
    def a_limit_buy_order(cls) -> "OrderRequestBuilder":
        return (
            cls()
            .with_type(OrderType.LIMIT)
            .with_price("50000.00")
            .with_time_in_force(TimeInForce.GTC)
        )

    # ---------------------------------------------------------------- #
    def with_symbol(self, symbol: str) -> "OrderRequestBuilder":
        self._symbol = symbol
        return self

    def with_side(self, side: OrderSide) -> "OrderRequestBuilder":
        self._side = OrderSide(side)
        return self

    def with_type(self, order_type: OrderType) -> "OrderRequestBuilder":
        self._type = OrderType(order_type)
        return self

    def with_quantity(self, quantity: str) -> "OrderRequestBuilder":
        self._quantity = quantity
        return self

    def with_price(self, price: Optional[str]) -> "OrderRequestBuilder":
        self._price = price
        return self

    def with_time_in_force(self, tif: Optional[TimeInForce]) -> "OrderRequestBuilder":
        self._time_in_force = TimeInForce(tif) if tif is not None else None
        return self

    def build(self) -> OrderRequest:
        return OrderRequest(
            symbol=self._symbol,
            side=self._side,
            type=self._type,
            quantity=self._quantity,
            price=self._price,
            time_in_force=self._time_in_force,
        )
