"""
trade_dispatcher.py
-------------------
Turns assembled stream messages into ``TradeEvent`` objects and fans them
out to subscribers.

Delivery is synchronous and in subscription order.  A listener that raises
is logged and skipped; the remaining listeners still receive the event.
Registering the same listener twice delivers every event to it twice.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, List, Optional

from core.errors import StreamParseError
from models.trade_event import Listener, TradeEvent, TradeEventListener


def _as_callable(listener: Listener) -> Callable[[TradeEvent], None]:
    if isinstance(listener, TradeEventListener):
        return listener.on_trade_event
    if callable(listener):
        return listener
    raise TypeError(f"listener must be callable or a TradeEventListener, got {listener!r}")


def parse_trade_event(message: str) -> Optional[TradeEvent]:
    """Return the trade in ``message``, or None if it is not a trade.

    Raises StreamParseError when the text is not JSON or the trade fields
    are not numbers.
    """
    try:
        payload: Any = json.loads(message)
    except (TypeError, ValueError, RecursionError) as exc:
        raise StreamParseError(f"invalid JSON: {exc}", message) from exc

    if not isinstance(payload, dict) or "p" not in payload or "E" not in payload:
        return None
    try:
        return TradeEvent(price=float(payload["p"]), event_time_ms=int(payload["E"]))
    except (TypeError, ValueError) as exc:
        raise StreamParseError(f"bad trade fields: {exc}", message) from exc


class TradeEventDispatcher:
    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._listeners: List[Listener] = []
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.parse_errors = 0
        self.listener_errors = 0

    # -------------------------------------------------------------- #
    def subscribe(self, listener: Listener) -> None:
        _as_callable(listener)
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> bool:
        """Drop the first registration of ``listener``."""
        try:
            self._listeners.remove(listener)
        except ValueError:
            return False
        return True

    @property
    def listeners(self) -> List[Listener]:
        return list(self._listeners)

    # -------------------------------------------------------------- #
    def dispatch(self, message: str) -> Optional[TradeEvent]:
        try:
            event = parse_trade_event(message)
        except StreamParseError as exc:
            self.parse_errors += 1
            self.logger.error("❌ Error parsing WS message: %.200s | %.200s", exc, exc.payload)
            return None
        if event is None:
            return None

        # snapshot so listeners may (un)subscribe while we iterate
        for listener in tuple(self._listeners):
            try:
                _as_callable(listener)(event)
            except Exception:
                self.listener_errors += 1
                self.logger.exception("Trade listener %r failed", listener)
        return event
