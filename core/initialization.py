"""
core/initialization.py
----------------------
Loads configuration from a ``key=value`` properties file (environment
variables win), validates it, and wires all runtime components with simple
dependency-injection (DI) overrides.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, Mapping, Optional

from dotenv import dotenv_values

from core.errors import ConfigurationError
from modules.latency_monitor import LatencyMonitor
from modules.rest_client import MarketDataClient
from modules.trade_dispatcher import TradeEventDispatcher
from modules.trader import OrderExecutor
from modules.websocket_client import StreamClient
from utils.config_manager import ExchangeConfig
from utils.config_validator import validate_config
from utils.logger import setup_logger
from utils.signing import RequestSigner

DEFAULT_CONFIG_FILE = "application.properties"

CONFIG_KEYS = [
    "api.key",
    "api.secret",
    "api.base.url",
    "api.testnet.base.url",
    "api.websocket.base.url",
    "api.use.testnet",
    "api.recv.window",
    "api.request.timeout",
    "stream.symbol",
]


def env_name(key: str) -> str:
    """``api.base.url`` → ``API_BASE_URL``."""
    return key.replace(".", "_").upper()


def load_properties(
    path: Optional[str] = DEFAULT_CONFIG_FILE,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Read ``path`` (if it exists) and overlay matching environment variables."""
    log = logging.getLogger(__name__)
    environ = os.environ if environ is None else environ

    values: Dict[str, str] = {}
    if path and os.path.exists(path):
        values.update({k: v for k, v in dotenv_values(path).items() if v is not None})
        log.debug("Loaded %d keys from %s", len(values), path)
    elif path:
        log.debug("No config file at %s; using environment only", path)

    for key in CONFIG_KEYS:
        override = environ.get(env_name(key))
        if override:
            values[key] = override
    return values


def load_configuration(
    path: Optional[str] = DEFAULT_CONFIG_FILE,
    environ: Optional[Mapping[str, str]] = None,
) -> ExchangeConfig:
    """
    Build the process-wide ``ExchangeConfig``.  Raises ``ConfigurationError``
    when a required key is missing; callers should not continue after that.
    """
    values = load_properties(path, environ)
    validate_config(values)
    config = ExchangeConfig.from_mapping(values)
    logging.getLogger(__name__).debug("Parsed config: %s", config.as_dict())
    return config


def initialize_components(
    config: ExchangeConfig,
    overrides: Optional[Dict[str, object]] = None,
    logger: Optional[logging.Logger] = None,
) -> Dict[str, object]:
    """
    Construct and wire together all runtime components (supports DI via overrides).

    Keys you can override:
    {"logger", "signer", "order_executor", "market_data", "dispatcher",
     "stream_client", "latency_monitor"}
    """
    overrides = overrides or {}
    if not config.api_key:
        raise ConfigurationError("api.key is missing or empty")

    logger = overrides.get("logger") or logger or setup_logger(
        "ExchangeClient", secrets=(config.api_key, config.api_secret)
    )

    signer = overrides.get("signer") or RequestSigner(config.api_secret)

    order_executor = overrides.get("order_executor") or OrderExecutor(
        config, signer, logger=logger.getChild("orders")
    )

    market_data = overrides.get("market_data") or MarketDataClient(
        config, logger=logger.getChild("market")
    )

    dispatcher = overrides.get("dispatcher") or TradeEventDispatcher(
        logger=logger.getChild("dispatch")
    )

    def _on_stream_error(exc: Exception) -> None:
        logger.error("Trade stream stopped: %s (reconnect is up to the caller)", exc)

    stream_client = overrides.get("stream_client") or StreamClient(
        config.websocket_base_url,
        dispatcher,
        on_error=_on_stream_error,
        logger=logger.getChild("stream"),
        open_timeout=config.request_timeout,
    )

    latency_monitor = overrides.get("latency_monitor") or LatencyMonitor(
        logger=logger.getChild("latency")
    )
    stream_client.subscribe(latency_monitor)

    logger.info("✅ Logger initialized.")
    logger.info("✅ Order executor initialized → %s", order_executor.order_url)
    logger.info("✅ Stream client initialized → %s", config.websocket_base_url)

    return {
        "logger": logger,
        "signer": signer,
        "order_executor": order_executor,
        "market_data": market_data,
        "dispatcher": dispatcher,
        "stream_client": stream_client,
        "latency_monitor": latency_monitor,
    }
