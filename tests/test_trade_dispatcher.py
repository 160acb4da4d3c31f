import json
import logging

import pytest

from core.errors import StreamParseError
from models.trade_event import TradeEvent, TradeEventListener
from modules.trade_dispatcher import TradeEventDispatcher, parse_trade_event

TRADE_MSG = '{"p":"100.5","E":1700000000000}'


class RecordingListener(TradeEventListener):
    def __init__(self, name, log):
        self.name = name
        self.log = log

    def on_trade_event(self, event):
        self.log.append((self.name, event))


@pytest.fixture
def dispatcher():
    return TradeEventDispatcher(logger=logging.getLogger("test.dispatch"))


def test_trade_delivered_to_all_listeners_in_order(dispatcher):
    calls = []
    for name in ("a", "b", "c"):
        dispatcher.subscribe(RecordingListener(name, calls))

    event = dispatcher.dispatch(TRADE_MSG)

    expected = TradeEvent(price=100.5, event_time_ms=1700000000000)
    assert event == expected
    assert calls == [("a", expected), ("b", expected), ("c", expected)]


def test_plain_callables_are_accepted(dispatcher):
    seen = []
    dispatcher.subscribe(seen.append)

    dispatcher.dispatch(TRADE_MSG)

    assert seen == [TradeEvent(100.5, 1700000000000)]


def test_full_binance_trade_payload(dispatcher):
    seen = []
    dispatcher.subscribe(seen.append)
    payload = {
        "e": "trade", "E": 1672515782136, "s": "BNBBTC", "t": 12345,
        "p": "0.001", "q": "100", "T": 1672515782136, "m": True, "M": True,
    }

    dispatcher.dispatch(json.dumps(payload))

    assert seen == [TradeEvent(price=0.001, event_time_ms=1672515782136)]


@pytest.mark.parametrize(
    "message",
    [
        '{"E":1700000000000}',
        '{"p":"100.5"}',
        '{"result":null,"id":1}',
        "[1,2,3]",
        "42",
    ],
)
def test_non_trade_messages_reach_no_listener(dispatcher, message, caplog):
    seen = []
    dispatcher.subscribe(seen.append)

    with caplog.at_level(logging.ERROR):
        assert dispatcher.dispatch(message) is None

    assert seen == []
    assert dispatcher.parse_errors == 0
    assert caplog.records == []


@pytest.mark.parametrize("message", ['{"p":"100.5","E":', "not json", '{"p":"abc","E":1}'])
def test_malformed_messages_are_logged_and_dropped(dispatcher, message, caplog):
    seen = []
    dispatcher.subscribe(seen.append)

    with caplog.at_level(logging.ERROR):
        assert dispatcher.dispatch(message) is None

    assert seen == []
    assert dispatcher.parse_errors == 1
    assert "Error parsing WS message" in caplog.text


def test_parse_trade_event_raises_stream_parse_error():
    with pytest.raises(StreamParseError) as info:
        parse_trade_event("{oops")
    assert info.value.payload == "{oops"


def test_failing_listener_does_not_block_the_rest(dispatcher):
    seen = []

    def broken(event):
        raise RuntimeError("listener bug")

    dispatcher.subscribe(seen.append)
    dispatcher.subscribe(broken)
    dispatcher.subscribe(lambda e: seen.append(("after", e)))

    event = dispatcher.dispatch(TRADE_MSG)

    assert seen == [event, ("after", event)]
    assert dispatcher.listener_errors == 1


def test_duplicate_subscription_delivers_twice(dispatcher):
    seen = []
    dispatcher.subscribe(seen.append)
    dispatcher.subscribe(seen.append)

    dispatcher.dispatch(TRADE_MSG)

    assert len(seen) == 2


def test_subscribe_during_dispatch_applies_to_next_message(dispatcher):
    seen = []

    def late(event):
        seen.append(("late", event.price))

    def adder(event):
        seen.append(("adder", event.price))
        dispatcher.subscribe(late)

    dispatcher.subscribe(adder)
    dispatcher.dispatch('{"p":"1","E":1}')
    assert seen == [("adder", 1.0)]

    dispatcher.unsubscribe(adder)
    dispatcher.dispatch('{"p":"2","E":2}')
    assert seen == [("adder", 1.0), ("late", 2.0)]


def test_unsubscribe(dispatcher):
    seen = []
    dispatcher.subscribe(seen.append)

    assert dispatcher.unsubscribe(seen.append) is True
    assert dispatcher.unsubscribe(seen.append) is False
    assert dispatcher.listeners == []


def test_subscribe_rejects_non_callables(dispatcher):
    with pytest.raises(TypeError):
        dispatcher.subscribe("not a listener")


def test_deeply_nested_payload_is_a_parse_error(dispatcher):
    seen = []
    dispatcher.subscribe(seen.append)

    assert dispatcher.dispatch("[" * 200000) is None
    assert dispatcher.parse_errors == 1
    assert seen == []

    dispatcher.dispatch(TRADE_MSG)
    assert [e.price for e in seen] == [100.5]
