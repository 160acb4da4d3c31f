"""
latency_monitor.py
------------------
Stream listener that measures how far behind the exchange clock each trade
arrives and grades the feed with a ``RiskLevel``.
"""
from __future__ import annotations

import logging
from collections import Counter
from typing import Callable, Optional

from models.risk_level import RiskLevel
from models.trade_event import TradeEvent, TradeEventListener
from utils.signing import stamp


class LatencyMonitor(TradeEventListener):
    def __init__(
        self,
        warning_ms: int = 150,
        critical_ms: int = 400,
        *,
        clock: Callable[[], int] = stamp,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if not 0 < warning_ms <= critical_ms:
            raise ValueError("need 0 < warning_ms <= critical_ms")
        self.warning_ms = warning_ms
        self.critical_ms = critical_ms
        self._clock = clock
        self.logger = logger or logging.getLogger(self.__class__.__name__)

        self.last_latency_ms: Optional[int] = None
        self.last_level: Optional[RiskLevel] = None
        self.counts: Counter = Counter()

    def classify(self, latency_ms: int) -> RiskLevel:
        if latency_ms < self.warning_ms:
            return RiskLevel.NORMAL
        if latency_ms <= self.critical_ms:
            return RiskLevel.WARNING
        return RiskLevel.CRITICAL

    def on_trade_event(self, event: TradeEvent) -> None:
        latency = self._clock() - event.event_time_ms
        level = self.classify(latency)
        self.counts[level] += 1

        if level is not self.last_level:
            log = self.logger.info if level is RiskLevel.NORMAL else self.logger.warning
            log("📶 Feed latency %s ms → %s (price %s)", latency, level.value, event.price)
        else:
            self.logger.debug("⚡ Trade %s latency %s ms", event.price, latency)

        self.last_latency_ms = latency
        self.last_level = level
