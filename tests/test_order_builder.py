import pytest

from core.errors import InvalidRequest
from models.order import OrderSide, OrderType, TimeInForce
from modules.order_builder import OrderRequestBuilder, normalize_price


def test_market_buy_defaults():
    order = OrderRequestBuilder.a_market_buy_order().build()

    assert order.symbol == "BTCUSDT"
    assert order.side is OrderSide.BUY
    assert order.type is OrderType.MARKET
    assert order.quantity == "0.001"
    assert order.price is None and order.time_in_force is None
    order.validate()


def test_limit_buy_defaults():
    order = OrderRequestBuilder.a_limit_buy_order().with_symbol("ETHUSDT").build()

    assert order.type is OrderType.LIMIT
    assert order.price == "50000.00"
    assert order.time_in_force is TimeInForce.GTC
    assert order.symbol == "ETHUSDT"
    order.validate()


def test_market_sell():
    order = OrderRequestBuilder.a_market_sell_order().with_quantity("2").build()

    assert order.side is OrderSide.SELL
    assert order.quantity == "2"


def test_builder_accepts_enum_values_as_strings():
    order = (
        OrderRequestBuilder()
        .with_side("SELL")
        .with_type("LIMIT")
        .with_price("1.00")
        .with_time_in_force("IOC")
        .build()
    )

    assert order.side is OrderSide.SELL
    assert order.time_in_force is TimeInForce.IOC


def test_switching_limit_to_market_without_clearing_price_is_invalid():
    order = OrderRequestBuilder.a_limit_buy_order().with_type(OrderType.MARKET).build()

    with pytest.raises(InvalidRequest):
        order.validate()


def test_orders_are_immutable():
    order = OrderRequestBuilder.a_market_buy_order().build()

    with pytest.raises(AttributeError):
        order.quantity = "5"


@pytest.mark.parametrize(
    "raw, decimals, expected",
    [
        ("90000.1234567", 2, "90000.12"),
        ("90000.1299", 2, "90000.12"),
        ("0.000123456", 6, "0.000123"),
        ("42", 2, "42.00"),
    ],
)
def test_normalize_price(raw, decimals, expected):
    assert normalize_price(raw, decimals) == expected
