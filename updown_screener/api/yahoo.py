"""
Yahoo Finance reference price change.

Uses the public chart endpoint: no authentication, one request per ticker.
The change is the regular market price against the previous close, in
percent (e.g. 1.25 for +1.25%).
"""
import logging
from typing import Dict, Optional
from urllib.parse import quote

import requests

from ..config import HTTP_TIMEOUT, YAHOO_CHART_URL
from ..errors import ReferenceLookupError

logger = logging.getLogger(__name__)


class YahooFinanceClient:
    """
    Fetches the daily percentage change of a ticker.

    Example:
        client = YahooFinanceClient()
        change = client.get_change("^GSPC")  # e.g. -0.42
    """

    def __init__(self, base_url: str = YAHOO_CHART_URL, timeout: float = HTTP_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        # The endpoint rejects requests without a browser-like agent
        self.session_headers = {
            "Accept": "application/json",
            "User-Agent": "Mozilla/5.0 (compatible; UpDownScreener/1.0)",
        }

    def get_chart_meta(self, ticker: str) -> Dict:
        """
        Fetch the chart metadata block for a ticker.

        Raises:
            ReferenceLookupError: On transport errors or an error payload
        """
        url = f"{self.base_url}/{quote(ticker, safe='')}"
        params = {"range": "1d", "interval": "1d"}

        try:
            response = requests.get(
                url, params=params, headers=self.session_headers, timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise ReferenceLookupError(ticker, str(e))

        chart = data.get("chart") or {}
        if chart.get("error"):
            error = chart["error"]
            raise ReferenceLookupError(ticker, error.get("description") or str(error))

        results = chart.get("result") or []
        if not results or not results[0].get("meta"):
            raise ReferenceLookupError(ticker, "empty chart result")
        return results[0]["meta"]

    def get_change(self, ticker: str) -> float:
        """
        Get the change since the previous close in percent.

        Args:
            ticker: Yahoo ticker (e.g., "NVDA", "^GSPC", "BTC-USD")

        Returns:
            Percentage change

        Raises:
            ReferenceLookupError: If the change cannot be computed
        """
        meta = self.get_chart_meta(ticker)
        price = self._as_float(meta.get("regularMarketPrice"))
        previous = self._as_float(meta.get("chartPreviousClose") or meta.get("previousClose"))

        if price is None or not previous:
            raise ReferenceLookupError(ticker, "missing price or previous close")

        change = (price / previous - 1.0) * 100.0
        logger.debug(f"{ticker}: {previous} -> {price} ({change:+.2f}%)")
        return change

    @staticmethod
    def _as_float(value) -> Optional[float]:
        try:
            return float(value)
        except (TypeError, ValueError):
            return None
