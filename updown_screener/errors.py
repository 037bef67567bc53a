"""
Error taxonomy for the screener.

Every fatal condition derives from ScreenerError so the command line can
report it and exit non-zero before any table is rendered. Unknown asset ids
are not errors; they are logged and skipped by the orchestrator.
"""


class ScreenerError(Exception):
    """Base exception for screener failures."""

    pass


class ConfigurationError(ScreenerError):
    """Raised when the configuration file is missing or invalid."""

    pass


class ResolutionError(ScreenerError):
    """Raised when a watched instrument cannot be mapped to a market."""

    def __init__(self, symbol: str, slug: str, reason: str = ""):
        self.symbol = symbol
        self.slug = slug
        self.reason = reason
        message = f"Failed to retrieve market {slug} for symbol {symbol}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MalformedPriceError(ScreenerError):
    """Raised when a book level price is not a valid decimal."""

    def __init__(self, price: object):
        self.price = price
        super().__init__(f"Failed to parse price: {price!r}")


class ReferenceLookupError(ScreenerError):
    """Raised when the reference price change cannot be fetched."""

    def __init__(self, ticker: str, reason: str = ""):
        self.ticker = ticker
        self.reason = reason
        message = f"Failed to retrieve price change for {ticker}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StreamError(ScreenerError):
    """Raised when the order book stream cannot be opened."""

    pass
