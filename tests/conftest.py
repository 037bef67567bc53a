"""
Shared fixtures and fake collaborators.

The fakes stand in for the Gamma API, the CLOB websocket and Yahoo Finance
so that no test touches the network.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

import pytest

from updown_screener.api.gamma import build_market_slug
from updown_screener.config import ScreenerConfig
from updown_screener.errors import ReferenceLookupError, ResolutionError
from updown_screener.screener.classifier import Thresholds
from updown_screener.screener.models import (
    BookUpdateEvent,
    MetricMode,
    PriceLevel,
    ResolvedMarket,
    WatchedInstrument,
)

TARGET_DATE = date(2026, 10, 17)


def book_event(asset_id: str, bids=(), asks=(), event_type: str = "book") -> BookUpdateEvent:
    """Build an event from plain price strings (sizes are irrelevant here)."""
    return BookUpdateEvent(
        event_type=event_type,
        asset_id=asset_id,
        bids=tuple(PriceLevel(price=p, size="100") for p in bids),
        asks=tuple(PriceLevel(price=p, size="100") for p in asks),
    )


class FakeGammaClient:
    """Resolves every symbol to tokens "<symbol>-up" / "<symbol>-down"."""

    def __init__(self, missing: Optional[List[str]] = None):
        self.missing = set(missing or [])
        self.calls: List[str] = []

    def resolve_market(self, instrument: WatchedInstrument, target_date: date) -> ResolvedMarket:
        slug = build_market_slug(instrument.symbol, target_date)
        self.calls.append(instrument.symbol)
        if instrument.symbol in self.missing:
            raise ResolutionError(instrument.symbol, slug, "market not found")
        return ResolvedMarket(
            instrument=instrument,
            slug=slug,
            token_ids=(f"{instrument.symbol}-up", f"{instrument.symbol}-down"),
            outcomes=("Up", "Down"),
        )


class FakeStream:
    """
    Delivers a fixed list of events to the handler, in order.

    Stops as soon as the handler returns False, like the real websocket.
    """

    def __init__(self, events: List[BookUpdateEvent], timed_out: bool = False):
        self.events = events
        self.timed_out = timed_out
        self.token_ids: List[str] = []
        self.timeout = None
        self.returns: List[bool] = []

    def stream(self, token_ids, handler, timeout=None) -> bool:
        self.token_ids = list(token_ids)
        self.timeout = timeout
        for event in self.events:
            keep_going = handler(event)
            self.returns.append(keep_going)
            if not keep_going:
                break
        return self.timed_out


class FakeReferenceClient:
    """Returns canned changes; unknown tickers fail like a real lookup."""

    def __init__(self, changes: Dict[str, float]):
        self.changes = changes
        self.calls: List[str] = []

    def get_change(self, ticker: str) -> float:
        self.calls.append(ticker)
        if ticker not in self.changes:
            raise ReferenceLookupError(ticker, "no data")
        return self.changes[ticker]


@pytest.fixture
def two_symbols():
    return (WatchedInstrument("A"), WatchedInstrument("B", alias="B-REF"))


@pytest.fixture
def screener_config(two_symbols):
    """Bid/ask config over instruments A and B."""
    return ScreenerConfig(
        symbols=two_symbols,
        mode=MetricMode.BID_ASK,
        thresholds=Thresholds(good=Decimal("0.50"), mediocre=Decimal("0.75")),
        target_date=TARGET_DATE,
    )


@pytest.fixture
def gamma_client():
    return FakeGammaClient()


@pytest.fixture
def reference_client():
    return FakeReferenceClient({"A": 1.5, "B-REF": -0.8})


@pytest.fixture
def make_event():
    return book_event


@pytest.fixture
def make_stream():
    return FakeStream


@pytest.fixture
def make_gamma():
    return FakeGammaClient


@pytest.fixture
def make_reference():
    return FakeReferenceClient
