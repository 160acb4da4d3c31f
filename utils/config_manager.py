from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from core.errors import ConfigurationError

_TRUE = {"1", "true", "yes", "on"}


class ConfigManager:
    """Read-only view over a flat ``key=value`` property map."""

    def __init__(self, config: Mapping[str, Any]):
        self.config = dict(config)

    def get(self, key: str, default: Any = None) -> Any:
        value = self.config.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            return default
        return value.strip() if isinstance(value, str) else value

    def get_int(self, key: str, default: Optional[int] = None) -> int:
        value = self.get(key)
        if value is None:
            if default is None:
                raise ConfigurationError(f"Key not found in config: {key}")
            return default
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"{key} must be an integer, got {value!r}") from exc

    def get_float(self, key: str, default: float) -> float:
        value = self.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"{key} must be a number, got {value!r}") from exc

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        return str(value).lower() in _TRUE


@dataclass(frozen=True)
class ExchangeConfig:
    """Process-wide exchange settings, built once at startup."""

    api_key: str = field(repr=False)
    api_secret: str = field(repr=False)
    base_url: str
    websocket_base_url: str
    testnet_base_url: Optional[str] = None
    use_testnet: bool = True
    recv_window: int = 5000
    request_timeout: float = 10.0
    stream_symbol: str = "BTCUSDT"

    @property
    def order_base_url(self) -> str:
        """Orders go to the testnet unless it is switched off."""
        if self.use_testnet and self.testnet_base_url:
            return self.testnet_base_url.rstrip("/")
        return self.base_url.rstrip("/")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ExchangeConfig":
        cfg = ConfigManager(values)
        return cls(
            api_key=cfg.get("api.key", ""),
            api_secret=cfg.get("api.secret", ""),
            base_url=cfg.get("api.base.url", ""),
            websocket_base_url=cfg.get("api.websocket.base.url", ""),
            testnet_base_url=cfg.get("api.testnet.base.url"),
            use_testnet=cfg.get_bool("api.use.testnet", True),
            recv_window=cfg.get_int("api.recv.window", 5000),
            request_timeout=cfg.get_float("api.request.timeout", 10.0),
            stream_symbol=cfg.get("stream.symbol", "BTCUSDT"),
        )

    def as_dict(self) -> Dict[str, Any]:
        """Loggable view: credentials masked."""
        return {
            "api.key": "***" if self.api_key else "",
            "api.secret": "***" if self.api_secret else "",
            "api.base.url": self.base_url,
            "api.testnet.base.url": self.testnet_base_url,
            "api.websocket.base.url": self.websocket_base_url,
            "api.use.testnet": self.use_testnet,
            "api.recv.window": self.recv_window,
            "api.request.timeout": self.request_timeout,
            "stream.symbol": self.stream_symbol,
        }
