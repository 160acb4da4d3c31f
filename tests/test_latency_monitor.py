import logging

import pytest

from models.risk_level import RiskLevel
from models.trade_event import TradeEvent
from modules.latency_monitor import LatencyMonitor
from modules.trade_dispatcher import TradeEventDispatcher


@pytest.fixture
def now():
    return {"ms": 1_700_000_000_000}


@pytest.fixture
def monitor(now):
    return LatencyMonitor(clock=lambda: now["ms"], logger=logging.getLogger("test.latency"))


@pytest.mark.parametrize(
    "latency, level",
    [
        (0, RiskLevel.NORMAL),
        (149, RiskLevel.NORMAL),
        (150, RiskLevel.WARNING),
        (400, RiskLevel.WARNING),
        (401, RiskLevel.CRITICAL),
    ],
)
def test_classify_thresholds(monitor, latency, level):
    assert monitor.classify(latency) is level


def test_tracks_last_latency_and_counts(monitor, now):
    monitor.on_trade_event(TradeEvent(100.0, now["ms"] - 20))
    monitor.on_trade_event(TradeEvent(100.0, now["ms"] - 500))

    assert monitor.last_latency_ms == 500
    assert monitor.last_level is RiskLevel.CRITICAL
    assert monitor.counts[RiskLevel.NORMAL] == 1
    assert monitor.counts[RiskLevel.CRITICAL] == 1


def test_level_change_is_logged_once(monitor, now, caplog):
    with caplog.at_level(logging.INFO, logger="test.latency"):
        monitor.on_trade_event(TradeEvent(1.0, now["ms"] - 200))
        monitor.on_trade_event(TradeEvent(1.0, now["ms"] - 210))

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "WARNING" in warnings[0].getMessage()


def test_works_as_stream_listener(monitor, now):
    dispatcher = TradeEventDispatcher()
    dispatcher.subscribe(monitor)

    dispatcher.dispatch('{"p":"10","E":%d}' % (now["ms"] - 30))

    assert monitor.last_level is RiskLevel.NORMAL
    assert monitor.last_latency_ms == 30


def test_rejects_inverted_thresholds():
    with pytest.raises(ValueError):
        LatencyMonitor(warning_ms=500, critical_ms=100)
