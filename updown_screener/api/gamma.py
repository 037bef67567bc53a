"""Gamma API client for daily Up/Down market discovery."""
import json
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import requests

from ..config import GAMMA_API_URL, HTTP_TIMEOUT
from ..errors import ResolutionError
from ..screener.models import ResolvedMarket, WatchedInstrument

logger = logging.getLogger(__name__)

# Outcome labels of the side that is streamed, in preference order
PRIMARY_OUTCOMES = ("UP", "YES")


def build_market_slug(symbol: str, target_date: date) -> str:
    """
    Build the slug of a daily Up/Down market.

    Example:
        >>> build_market_slug("NVDA", date(2026, 10, 17))
        'nvda-up-or-down-on-october-17-2026'
    """
    month = target_date.strftime("%B").lower()
    return f"{symbol.lower()}-up-or-down-on-{month}-{target_date.day}-{target_date.year}"


def _parse_list(value: Any) -> List[str]:
    """Gamma encodes list fields as JSON strings."""
    if value is None:
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            return []
    if not isinstance(value, list):
        return []
    return [str(item) for item in value]


class GammaClient:
    """
    Client for the Polymarket Gamma API.

    Used for resolving watched instruments to their daily Up/Down market and
    the market's outcome token IDs.

    Example:
        client = GammaClient()
        market = client.resolve_market(WatchedInstrument("NVDA"), date.today())
        print(market.slug, market.primary_token_id)
    """

    def __init__(self, base_url: str = GAMMA_API_URL, timeout: float = HTTP_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session_headers = {
            "Accept": "application/json",
            "User-Agent": "UpDownScreener/1.0",
        }

    def get_market_by_slug(self, slug: str) -> Optional[Dict]:
        """
        Fetch a single market by its exact slug.

        Args:
            slug: Market slug (e.g., "nvda-up-or-down-on-october-17-2026")

        Returns:
            Market dictionary or None when no market has that slug

        Raises:
            requests.RequestException: On transport or HTTP errors
        """
        response = requests.get(
            f"{self.base_url}/markets",
            params={"slug": slug},
            headers=self.session_headers,
            timeout=self.timeout,
        )
        response.raise_for_status()

        data = response.json()
        if isinstance(data, list):
            return data[0] if data else None
        if isinstance(data, dict) and data.get("slug"):
            return data
        return None

    def parse_market(self, instrument: WatchedInstrument, data: Dict) -> ResolvedMarket:
        """
        Parse raw market data into a ResolvedMarket.

        Token IDs are reordered so the "Up" (or "Yes") outcome comes first.

        Raises:
            ResolutionError: If the market has no slug or no token IDs
        """
        slug = data.get("slug") or ""
        token_ids = _parse_list(data.get("clobTokenIds"))
        outcomes = _parse_list(data.get("outcomes"))

        if not slug:
            raise ResolutionError(instrument.symbol, slug, "market has no slug")
        if not token_ids:
            raise ResolutionError(instrument.symbol, slug, "market has no outcome tokens")

        if len(outcomes) == len(token_ids):
            for i, outcome in enumerate(outcomes):
                if outcome.upper() in PRIMARY_OUTCOMES:
                    token_ids.insert(0, token_ids.pop(i))
                    outcomes.insert(0, outcomes.pop(i))
                    break

        return ResolvedMarket(
            instrument=instrument,
            slug=slug,
            token_ids=tuple(token_ids),
            condition_id=data.get("conditionId", "") or data.get("condition_id", ""),
            question=data.get("question", ""),
            outcomes=tuple(outcomes),
        )

    def resolve_market(self, instrument: WatchedInstrument, target_date: date) -> ResolvedMarket:
        """
        Resolve a watched instrument to its daily market.

        Args:
            instrument: Configured instrument
            target_date: Date of the daily market

        Returns:
            ResolvedMarket

        Raises:
            ResolutionError: If the lookup fails or the market does not exist
        """
        slug = build_market_slug(instrument.symbol, target_date)
        logger.debug(f"Resolving {instrument.symbol} via {slug}")

        try:
            data = self.get_market_by_slug(slug)
        except (requests.RequestException, ValueError) as e:
            raise ResolutionError(instrument.symbol, slug, str(e))

        if not data:
            raise ResolutionError(instrument.symbol, slug, "market not found")

        market = self.parse_market(instrument, data)
        logger.info(f"Resolved {instrument.symbol} -> {market.slug} ({len(market.token_ids)} tokens)")
        return market
