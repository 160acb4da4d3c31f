from enum import Enum


class RiskLevel(str, Enum):
    """Health of the market data feed, judged by event latency."""

    NORMAL = "NORMAL"      # below the warning threshold
    WARNING = "WARNING"    # noticeable delay, minor congestion
    CRITICAL = "CRITICAL"  # stale data, potential packet loss
