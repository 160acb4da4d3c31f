"""
websocket_client.py
-------------------
Connection lifecycle for the ``<symbol>@trade`` stream.

    DISCONNECTED -> CONNECTING -> OPEN -> CLOSING -> DISCONNECTED
    OPEN -> ERRORED -> DISCONNECTED   (transport error)
    CONNECTING -> ERRORED -> DISCONNECTED   (handshake failure)

Fragments are read one at a time by a single reader task, reassembled by a
per-connection ``FrameAssembler`` and handed to the ``TradeEventDispatcher``.
Listeners run inside the reader: a slow listener delays the next read.  The
reader only pulls a fragment after the previous one is fully handled, which
is the backpressure; ``credits_granted`` just counts those grants.  Hand
heavy work to your own queue/task.

There is no reconnect logic here; after an error the client is back in
DISCONNECTED and the caller decides whether to ``connect`` again.
"""
import asyncio
import logging
from enum import Enum
from typing import Callable, Optional, Union

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from core.errors import ConfigurationError, StreamTransportError
from models.trade_event import Listener
from modules.frame_assembler import FrameAssembler
from modules.trade_dispatcher import TradeEventDispatcher

ErrorCallback = Callable[[StreamTransportError], None]


class StreamState(str, Enum):
    DISCONNECTED = "DISCONNECTED"
    CONNECTING = "CONNECTING"
    OPEN = "OPEN"
    CLOSING = "CLOSING"
    ERRORED = "ERRORED"


class StreamClient:
    STREAM_SUFFIX = "@trade"

    def __init__(
        self,
        ws_base_url: str,
        dispatcher: Optional[TradeEventDispatcher] = None,
        *,
        on_error: Optional[ErrorCallback] = None,
        logger: Optional[logging.Logger] = None,
        open_timeout: float = 10.0,
    ):
        if not ws_base_url:
            raise ConfigurationError("api.websocket.base.url is missing")
        self.ws_base_url = ws_base_url
        self.logger = logger or logging.getLogger(self.__class__.__name__)
        self.dispatcher = dispatcher or TradeEventDispatcher(logger=self.logger)
        self.on_error = on_error
        self.open_timeout = open_timeout

        self.symbol: Optional[str] = None
        self.credits_granted = 0
        self._state = StreamState.DISCONNECTED
        self._ws = None
        self._assembler: Optional[FrameAssembler] = None
        self._reader: Optional[asyncio.Task] = None

    # ------------------------------------------------------------------ #
    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is StreamState.OPEN

    def subscribe(self, listener: Listener) -> None:
        self.dispatcher.subscribe(listener)

    def unsubscribe(self, listener: Listener) -> bool:
        return self.dispatcher.unsubscribe(listener)

    def stream_url(self, symbol: str) -> str:
        return f"{self.ws_base_url}{symbol.lower()}{self.STREAM_SUFFIX}"

    # ------------------------------------------------------------------ #
    async def connect(self, symbol: str) -> None:
        """Open the trade stream for ``symbol``; returns once the handshake is done."""
        if self._state is not StreamState.DISCONNECTED:
            raise StreamTransportError(f"cannot connect while {self._state.value}")

        url = self.stream_url(symbol)
        self._set_state(StreamState.CONNECTING)
        self.logger.info("🔌 CONNECTING to WebSocket stream: %s", url)
        try:
            ws = await websockets.connect(url, open_timeout=self.open_timeout)
        except (OSError, asyncio.TimeoutError, WebSocketException) as exc:
            error = self._fail(exc)
            raise error from exc
        except asyncio.CancelledError:
            self.logger.info("Handshake with %s cancelled", url)
            self._set_state(StreamState.DISCONNECTED)
            raise

        self._ws = ws
        self.symbol = symbol
        self._assembler = FrameAssembler(grant_credit=self._on_credit)
        self._set_state(StreamState.OPEN)
        self.logger.info("✅ WEBSOCKET OPENED! Real-time data stream started for %s", symbol.upper())
        self._reader = asyncio.create_task(self._read_loop(ws))

    async def close(self) -> None:
        if self._state is not StreamState.OPEN:
            return
        self._set_state(StreamState.CLOSING)
        ws, reader = self._ws, self._reader
        try:
            await ws.close()
        finally:
            if reader is not None:
                await reader
            self._set_state(StreamState.DISCONNECTED)

    async def wait_closed(self) -> None:
        """Block until the reader stops (peer close, error or ``close()``)."""
        if self._reader is not None:
            await asyncio.shield(self._reader)

    async def run(self, symbol: str) -> None:
        await self.connect(symbol)
        await self.wait_closed()

    # ------------------------------------------------------------------ #
    async def _read_loop(self, ws) -> None:
        try:
            while True:
                await self._read_message(ws)
        except ConnectionClosedOK as e:
            self.logger.info("WS closed: %s", e)
        except ConnectionClosed as e:
            if self._state is StreamState.CLOSING:
                self.logger.info("WS closed during shutdown: %s", e)
            else:
                self._fail(e)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.logger.exception("Listen loop crashed")
            self._fail(e)
        finally:
            self._ws = None
            self._assembler = None
            if self._state is not StreamState.CLOSING:
                self._set_state(StreamState.DISCONNECTED)
            self.logger.info("🔁 WS session ended")

    async def _read_message(self, ws) -> None:
        # one fragment of look-ahead: the transport only says a fragment was
        # the last one when the iterator ends
        pending: Optional[Union[str, bytes]] = None
        async for fragment in ws.recv_streaming():
            if pending is not None:
                self._on_text(pending, False)
            pending = fragment
        self._on_text(pending if pending is not None else "", True)

    def _on_text(self, data: Union[str, bytes], is_final: bool) -> None:
        if isinstance(data, bytes):
            data = data.decode("utf-8", errors="replace")
        self._assembler.feed(data, is_final, self.dispatcher.dispatch)

    def _on_credit(self, units: int) -> None:
        # bookkeeping only: backpressure comes from the single reader, which
        # pulls the next fragment after feed() returns
        self.credits_granted += units

    def _fail(self, exc: BaseException) -> StreamTransportError:
        self._set_state(StreamState.ERRORED)
        error = StreamTransportError(str(exc) or exc.__class__.__name__)
        error.__cause__ = exc
        self.logger.error("❌ WEBSOCKET ERROR: %s", error)
        if self.on_error is not None:
            try:
                self.on_error(error)
            except Exception:
                self.logger.exception("Stream error callback failed")
        self._set_state(StreamState.DISCONNECTED)
        return error

    def _set_state(self, state: StreamState) -> None:
        if state is not self._state:
            self.logger.debug("stream state %s -> %s", self._state.value, state.value)
            self._state = state
