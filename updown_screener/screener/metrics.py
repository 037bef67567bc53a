"""
Metric derivation from raw order book levels.

The market channel delivers each side of the book so that the most
competitive level comes last: bids ascend towards the best bid, asks descend
towards the best ask. The best price of a side is therefore the price of its
last level, whatever the numeric ordering of the others.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

from ..errors import MalformedPriceError
from .models import BookUpdateEvent, DerivedMetrics, MetricMode, PriceLevel


def parse_price(text: str) -> Decimal:
    """
    Parse a textual price into a Decimal.

    Raises:
        MalformedPriceError: If the text is not a finite decimal number
    """
    try:
        price = Decimal(str(text).strip())
    except (InvalidOperation, TypeError, ValueError):
        raise MalformedPriceError(text)

    if not price.is_finite():
        raise MalformedPriceError(text)
    return price


def best_price(levels: Sequence[PriceLevel]) -> Optional[Decimal]:
    """Return the price of the last level, or None for an empty side."""
    if not levels:
        return None
    return parse_price(levels[-1].price)


def derive_metrics(
    event: BookUpdateEvent,
    mode: MetricMode,
    change: float = math.nan,
) -> DerivedMetrics:
    """
    Derive pricing metrics for one book snapshot.

    Both modes share the same inputs: in Yes/No mode the yes price is the
    best ask and the no price is one minus the best bid; see DerivedMetrics.

    Args:
        event: Book snapshot for the instrument's streamed token
        mode: Derivation mode
        change: Reference price change in percent (NaN when unavailable)

    Returns:
        DerivedMetrics

    Raises:
        MalformedPriceError: If a best level price cannot be parsed
    """
    return DerivedMetrics(
        mode=mode,
        best_bid=best_price(event.bids),
        best_ask=best_price(event.asks),
        change=change,
    )
