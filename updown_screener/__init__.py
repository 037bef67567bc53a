"""
Polymarket Up/Down screener.

Resolves a watch-list of instruments to their daily "Up or Down" markets,
waits for one order book snapshot per market and prints a comparison table
alongside each underlying's price change.
"""

__version__ = "0.1.0"
