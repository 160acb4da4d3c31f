import logging

import pytest

from core.errors import ConfigurationError
from core.initialization import initialize_components, load_configuration, load_properties
from modules.trader import OrderExecutor
from modules.websocket_client import StreamClient, StreamState
from utils.config_manager import ConfigManager, ExchangeConfig
from utils.config_validator import validate_config

PROPERTIES = """\
# exchange credentials
api.key=file-key
api.secret=file-secret
api.base.url=https://api.binance.com
api.testnet.base.url=https://testnet.binance.vision
api.websocket.base.url=wss://stream.binance.com:9443/ws/
api.recv.window=6000
"""


@pytest.fixture
def props_file(tmp_path):
    path = tmp_path / "application.properties"
    path.write_text(PROPERTIES, encoding="utf-8")
    return str(path)


@pytest.fixture
def valid():
    return {
        "api.key": "k",
        "api.secret": "s",
        "api.base.url": "https://api.binance.com",
        "api.testnet.base.url": "https://testnet.binance.vision",
        "api.websocket.base.url": "wss://stream.binance.com:9443/ws/",
    }


def test_load_configuration_from_properties_file(props_file):
    config = load_configuration(props_file, environ={})

    assert config.api_key == "file-key"
    assert config.api_secret == "file-secret"
    assert config.recv_window == 6000
    assert config.use_testnet is True
    assert config.order_base_url == "https://testnet.binance.vision"
    assert config.stream_symbol == "BTCUSDT"


def test_environment_overrides_file(props_file):
    config = load_configuration(
        props_file, environ={"API_SECRET": "env-secret", "API_USE_TESTNET": "false"}
    )

    assert config.api_secret == "env-secret"
    assert config.use_testnet is False
    assert config.order_base_url == "https://api.binance.com"


def test_missing_file_falls_back_to_environment(tmp_path, valid):
    environ = {k.replace(".", "_").upper(): v for k, v in valid.items()}

    values = load_properties(str(tmp_path / "absent.properties"), environ=environ)

    assert values == valid


@pytest.mark.parametrize(
    "missing", ["api.key", "api.secret", "api.base.url", "api.websocket.base.url", "api.testnet.base.url"]
)
def test_missing_required_key_is_fatal(valid, missing):
    del valid[missing]
    with pytest.raises(ConfigurationError) as info:
        validate_config(valid)
    assert missing in str(info.value)


def test_testnet_url_optional_when_testnet_disabled(valid):
    del valid["api.testnet.base.url"]
    valid["api.use.testnet"] = "false"

    validate_config(valid)


@pytest.mark.parametrize(
    "key, value",
    [
        ("api.base.url", "ftp://api.binance.com"),
        ("api.websocket.base.url", "https://stream.binance.com"),
        ("api.recv.window", "soon"),
        ("api.recv.window", "0"),
        ("api.request.timeout", "-1"),
    ],
)
def test_malformed_values_are_rejected(valid, key, value):
    valid[key] = value
    with pytest.raises(ConfigurationError):
        validate_config(valid)


def test_blank_values_count_as_missing(valid):
    valid["api.secret"] = "   "
    with pytest.raises(ConfigurationError):
        validate_config(valid)


def test_config_repr_hides_credentials(valid):
    config = ExchangeConfig.from_mapping(valid)

    assert "api_key" not in repr(config)
    assert "'s'" not in repr(config)
    assert config.as_dict()["api.secret"] == "***"


def test_config_manager_get_int():
    cfg = ConfigManager({"limit": "10"})
    assert cfg.get_int("limit") == 10
    assert cfg.get_int("other", 5) == 5
    with pytest.raises(ConfigurationError):
        cfg.get_int("other")


def test_initialize_components_wires_everything(valid):
    config = ExchangeConfig.from_mapping(valid)

    components = initialize_components(config, logger=logging.getLogger("test.init"))

    assert isinstance(components["order_executor"], OrderExecutor)
    stream = components["stream_client"]
    assert isinstance(stream, StreamClient)
    assert stream.state is StreamState.DISCONNECTED
    assert components["latency_monitor"] in stream.dispatcher.listeners
    assert stream.dispatcher is components["dispatcher"]


def test_initialize_components_requires_api_key(valid):
    valid["api.key"] = ""
    config = ExchangeConfig.from_mapping(valid)

    with pytest.raises(ConfigurationError):
        initialize_components(config, logger=logging.getLogger("test.init"))
