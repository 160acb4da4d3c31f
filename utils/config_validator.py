from typing import Any, Mapping

from core.errors import ConfigurationError
from utils.config_manager import ConfigManager

REQUIRED_KEYS = [
    "api.key",
    "api.secret",
    "api.base.url",
    "api.websocket.base.url",
]


def validate_config(config: Mapping[str, Any]) -> None:
    cfg = ConfigManager(config)

    missing = [k for k in REQUIRED_KEYS if cfg.get(k) is None]
    if cfg.get_bool("api.use.testnet", True) and cfg.get("api.testnet.base.url") is None:
        missing.append("api.testnet.base.url")
    if missing:
        raise ConfigurationError(f"Missing required configuration keys: {missing}")

    for key in ("api.base.url", "api.testnet.base.url"):
        url = cfg.get(key)
        if url is not None and not url.startswith(("http://", "https://")):
            raise ConfigurationError(f"{key} must be an http(s) URL.")

    if not cfg.get("api.websocket.base.url").startswith(("ws://", "wss://")):
        raise ConfigurationError("api.websocket.base.url must be a ws(s) URL.")

    if cfg.get_int("api.recv.window", 5000) <= 0:
        raise ConfigurationError("api.recv.window must be positive.")
    if cfg.get_float("api.request.timeout", 10.0) <= 0:
        raise ConfigurationError("api.request.timeout must be positive.")
