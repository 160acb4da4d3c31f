import asyncio
import logging
import sys

from core.errors import ConfigurationError, StreamTransportError
from core.initialization import initialize_components, load_configuration
from models.trade_event import TradeEvent
from utils.logger import setup_logger


def log_trade(event: TradeEvent) -> None:
    logging.getLogger("ExchangeClient.trades").info("💹 %s @ %s", event.price, event.event_time_ms)


async def run_client(config_path: str = "application.properties") -> None:
    """
    Entrypoint coroutine: load configuration, wire components, print the
    last REST price once and then stream trades for ``stream.symbol`` until
    the connection ends.  There is no reconnect; rerun to resume.
    """
    config = load_configuration(config_path)

    # Attach console + rotating file handlers before any async work starts.
    logger = setup_logger(
        "ExchangeClient", to_console=True, secrets=(config.api_key, config.api_secret)
    )
    components = initialize_components(config, logger=logger)

    symbol = config.stream_symbol
    market_data = components["market_data"]
    await market_data.poll_price(
        symbol, lambda s, p: logger.info("🏷️ %s REST price %s", s, p), iterations=1
    )

    stream_client = components["stream_client"]
    stream_client.subscribe(log_trade)
    try:
        await stream_client.run(symbol)
    finally:
        await stream_client.close()
        market_data.log_metrics()


def main():
    config_path = sys.argv[1] if len(sys.argv) > 1 else "application.properties"
    try:
        asyncio.run(run_client(config_path))
    except ConfigurationError as e:
        print(f"❌ Configuration error: {e}")
        sys.exit(2)
    except StreamTransportError as e:
        print(f"❌ Stream failed: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
