"""
frame_assembler.py
------------------
Rebuilds whole text messages from WebSocket fragments.

One assembler belongs to one connection and is driven by one reader at a
time, so the buffer is not locked.
"""
from __future__ import annotations

from typing import Callable, List, Optional

CreditFn = Callable[[int], None]


class FrameAssembler:
    def __init__(self, grant_credit: Optional[CreditFn] = None) -> None:
        self._parts: List[str] = []
        self._grant_credit = grant_credit
        self.messages_completed = 0

    @property
    def pending(self) -> int:
        """Characters buffered for the message in progress."""
        return sum(len(p) for p in self._parts)

    def on_fragment(self, data: str, is_final: bool) -> Optional[str]:
        """Buffer ``data``; return the full message once ``is_final`` arrives."""
        self._parts.append(data)
        if not is_final:
            return None
        message = "".join(self._parts)
        self.reset()
        self.messages_completed += 1
        return message

    def reset(self) -> None:
        self._parts = []

    def grant(self, units: int = 1) -> None:
        """Report that ``units`` more fragments may be read (see ``StreamClient``)."""
        if self._grant_credit is not None:
            self._grant_credit(units)

    def feed(self, data: str, is_final: bool, handle: Callable[[str], object]) -> None:
        """Assemble ``data`` and pass a completed message to ``handle``.

        Credit for the next fragment is granted whatever ``handle`` does,
        including raising.
        """
        try:
            message = self.on_fragment(data, is_final)
            if message is not None:
                handle(message)
        finally:
            self.grant(1)
