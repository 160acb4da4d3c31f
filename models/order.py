"""
models/order.py
---------------
Order request types plus the two JSON envelopes the order endpoint answers
with.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from core.errors import InvalidRequest


class OrderSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class OrderType(str, Enum):
    MARKET = "MARKET"
    LIMIT = "LIMIT"


class TimeInForce(str, Enum):
    GTC = "GTC"
    IOC = "IOC"
    FOK = "FOK"


@dataclass(frozen=True)
class OrderRequest:
    """What the caller wants to trade. Carries no timestamp."""

    symbol: str
    side: OrderSide
    type: OrderType
    quantity: str
    price: Optional[str] = None
    time_in_force: Optional[TimeInForce] = None

    def __post_init__(self) -> None:
        # accept "BUY" / "LIMIT" / "GTC"; unknown values are left for validate()
        for name, enum_cls in (("side", OrderSide), ("type", OrderType), ("time_in_force", TimeInForce)):
            value = getattr(self, name)
            if value is None or isinstance(value, enum_cls):
                continue
            try:
                object.__setattr__(self, name, enum_cls(value))
            except ValueError:
                pass

    def validate(self) -> None:
        if not isinstance(self.side, OrderSide):
            raise InvalidRequest(f"unsupported order side: {self.side!r}")
        if self.time_in_force is not None and not isinstance(self.time_in_force, TimeInForce):
            raise InvalidRequest(f"unsupported timeInForce: {self.time_in_force!r}")
        if not self.symbol:
            raise InvalidRequest("symbol is required")
        if not self.quantity:
            raise InvalidRequest("quantity is required")
        if self.type is OrderType.LIMIT:
            if self.price is None or self.time_in_force is None:
                raise InvalidRequest("LIMIT orders need both price and timeInForce")
        elif self.type is OrderType.MARKET:
            if self.price is not None or self.time_in_force is not None:
                raise InvalidRequest("MARKET orders must not carry price or timeInForce")
        else:
            raise InvalidRequest(f"unsupported order type: {self.type!r}")


@dataclass(frozen=True)
class SignedOrderRequest:
    """One send attempt: the request stamped with send time and signed."""

    request: OrderRequest
    timestamp: int
    recv_window: int
    query: str
    signature: str

    @property
    def url_query(self) -> str:
        return f"{self.query}&signature={self.signature}"


class OrderConfirmation(BaseModel):
    """2xx body of ``POST /api/v3/order``."""

    model_config = ConfigDict(extra="allow")

    order_id: int = Field(..., alias="orderId")
    status: Optional[str] = None
    symbol: Optional[str] = None
    client_order_id: Optional[str] = Field(None, alias="clientOrderId")


class ExchangeError(BaseModel):
    """Error envelope returned with non-2xx statuses."""

    code: int
    msg: str
