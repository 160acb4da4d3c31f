"""
core/errors.py
--------------
Exception taxonomy shared by the order and stream paths.

Exchange rejections and transport failures on the order path are *results*
(see ``models.order_result``), not exceptions.  Only the conditions below are
raised.
"""
from __future__ import annotations


class ExchangeClientError(Exception):
    """Base class for everything this package raises."""


class ConfigurationError(ExchangeClientError):
    """Missing or malformed configuration. Fatal at startup."""


class InvalidRequest(ExchangeClientError):
    """Caller-built order violates the LIMIT/MARKET field rules."""


class StreamParseError(ExchangeClientError):
    """A single stream message could not be decoded."""

    def __init__(self, message: str, payload: str = "") -> None:
        super().__init__(message)
        self.payload = payload


class StreamTransportError(ExchangeClientError):
    """Connection-level stream failure; the stream is gone."""
