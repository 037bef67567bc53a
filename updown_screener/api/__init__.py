"""
External API clients.

- GammaClient: daily market and outcome token lookup
- CLOBWebSocket: market channel order book stream
- YahooFinanceClient: reference price change
"""

from .gamma import GammaClient, build_market_slug
from .clob_ws import CLOBWebSocket
from .yahoo import YahooFinanceClient

__all__ = [
    "GammaClient",
    "build_market_slug",
    "CLOBWebSocket",
    "YahooFinanceClient",
]
