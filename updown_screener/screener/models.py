"""
Data models for the screener core.

These are immutable value objects shared by the API clients, the
orchestrator and the renderer.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple

# Event type carrying a full order book snapshot
BOOK_EVENT = "book"

ONE = Decimal("1")


class MetricMode(Enum):
    """Which pair of prices the screener derives from a book."""

    BID_ASK = "bid_ask"
    YES_NO = "yes_no"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class WatchedInstrument:
    """
    A configured instrument.

    Attributes:
        symbol: Display symbol, also used to build the market slug.
        alias: Optional ticker for the reference price lookup.
    """

    symbol: str
    alias: Optional[str] = None

    @property
    def reference_ticker(self) -> str:
        """Ticker used for the reference price change lookup."""
        return self.alias or self.symbol


@dataclass(frozen=True)
class ResolvedMarket:
    """
    A watched instrument mapped to its Polymarket market.

    Attributes:
        instrument: The configured instrument.
        slug: Gamma market slug.
        condition_id: Market condition ID.
        question: Market question text.
        token_ids: Outcome token IDs, in outcome order.
        outcomes: Outcome labels (e.g. "Up", "Down").
    """

    instrument: WatchedInstrument
    slug: str
    token_ids: Tuple[str, ...]
    condition_id: str = ""
    question: str = ""
    outcomes: Tuple[str, ...] = ()

    @property
    def primary_token_id(self) -> str:
        """Token of the first outcome ("Up"/"Yes"), the one that is streamed."""
        return self.token_ids[0]


@dataclass(frozen=True)
class PriceLevel:
    """One order book level as delivered by the stream (textual values)."""

    price: str
    size: str = "0"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PriceLevel":
        return cls(price=data.get("price"), size=data.get("size", "0"))


@dataclass(frozen=True)
class BookUpdateEvent:
    """
    A single event from the market channel.

    Bid and ask levels keep the order in which they were delivered; the
    most competitive price is the last element of each side.
    """

    event_type: str
    asset_id: str
    bids: Tuple[PriceLevel, ...] = ()
    asks: Tuple[PriceLevel, ...] = ()
    market: Optional[str] = None
    timestamp: Optional[str] = None

    @property
    def is_book(self) -> bool:
        return self.event_type == BOOK_EVENT

    @classmethod
    def from_message(cls, message: Dict[str, Any]) -> "BookUpdateEvent":
        """
        Build an event from a decoded websocket message.

        Args:
            message: Decoded JSON object from the market channel

        Returns:
            BookUpdateEvent
        """
        bids = message.get("bids") or message.get("buys") or []
        asks = message.get("asks") or message.get("sells") or []
        return cls(
            event_type=message.get("event_type") or message.get("type") or "",
            asset_id=message.get("asset_id", ""),
            bids=tuple(PriceLevel.from_dict(level) for level in bids),
            asks=tuple(PriceLevel.from_dict(level) for level in asks),
            market=message.get("market"),
            timestamp=message.get("timestamp"),
        )


@dataclass(frozen=True)
class DerivedMetrics:
    """
    Pricing snapshot for one instrument.

    Attributes:
        mode: Derivation mode the metrics were computed for.
        best_bid: Best bid price, None when the bid side is empty.
        best_ask: Best ask price, None when the ask side is empty.
        change: Reference price change in percent, NaN when undefined.
    """

    mode: MetricMode
    best_bid: Optional[Decimal] = None
    best_ask: Optional[Decimal] = None
    change: float = math.nan

    @property
    def yes_price(self) -> Optional[Decimal]:
        """Cost of buying the first outcome."""
        return self.best_ask

    @property
    def no_price(self) -> Optional[Decimal]:
        """Cost of buying the second outcome, implied from the best bid."""
        if self.best_bid is None:
            return None
        return ONE - self.best_bid

    @property
    def spread(self) -> Optional[Decimal]:
        if self.mode == MetricMode.YES_NO:
            if self.yes_price is None or self.no_price is None:
                return None
            return self.yes_price + self.no_price - ONE

        if self.best_bid is None or self.best_ask is None:
            return None
        return self.best_ask - self.best_bid

