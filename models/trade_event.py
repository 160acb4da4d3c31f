"""
models/trade_event.py
---------------------
One market trade as seen on the ``<symbol>@trade`` stream, and the observer
interface that receives it.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Union


@dataclass(frozen=True)
class TradeEvent:
    price: float
    event_time_ms: int


class TradeEventListener(ABC):
    """Implement ``on_trade_event`` to receive trades from a StreamClient."""

    @abstractmethod
    def on_trade_event(self, event: TradeEvent) -> None:
        raise NotImplementedError


Listener = Union[TradeEventListener, Callable[[TradeEvent], None]]
