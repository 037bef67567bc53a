"""
Threshold classification of screener cells.

A price is only worth highlighting when it is cheap on the side the
reference market has already moved towards: a cheap "Up" price after the
underlying rose, a cheap "Down" price after it fell.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class Tier(Enum):
    """Presentation tier of a cell."""

    FAVORABLE = "favorable"
    MEDIOCRE = "mediocre"
    NEUTRAL = "neutral"
    UNFAVORABLE = "unfavorable"
    NOT_APPLICABLE = "not_applicable"

    def __str__(self) -> str:
        return self.value


class Direction(Enum):
    """Directional bias of a price column."""

    UP = 1
    DOWN = -1


@dataclass(frozen=True)
class Thresholds:
    """
    Cut-off values for highlighting.

    Attributes:
        good: Prices at or below this are favorable.
        mediocre: Prices above good and at or below this are mediocre.
        spread: Spreads at or above this are flagged as wide.
        spread_colors: Whether spread cells are classified at all.
    """

    good: Decimal
    mediocre: Optional[Decimal] = None
    spread: Optional[Decimal] = None
    spread_colors: bool = False


def _is_undefined(change: Optional[float]) -> bool:
    return change is None or math.isnan(change)


def agrees(change: float, direction: Direction) -> bool:
    """Check whether the sign of the change matches the direction."""
    if direction == Direction.UP:
        return change > 0
    return change < 0


def classify(
    value: Optional[Decimal],
    change: Optional[float],
    direction: Direction,
    thresholds: Thresholds,
) -> Tier:
    """
    Classify a price against the configured bounds.

    Args:
        value: Price to classify (None when the book side was empty)
        change: Reference price change, used only for its sign
        direction: Directional bias of the price's column
        thresholds: Bounds to apply

    Returns:
        Tier for the cell
    """
    if value is None or _is_undefined(change):
        return Tier.NOT_APPLICABLE

    if not agrees(change, direction):
        return Tier.NEUTRAL

    if value <= thresholds.good:
        return Tier.FAVORABLE
    if thresholds.mediocre is not None and value <= thresholds.mediocre:
        return Tier.MEDIOCRE
    return Tier.NEUTRAL


def classify_spread(spread: Optional[Decimal], thresholds: Thresholds) -> Tier:
    """Flag wide spreads, independent of direction."""
    if spread is None:
        return Tier.NOT_APPLICABLE
    if not thresholds.spread_colors or thresholds.spread is None:
        return Tier.NEUTRAL
    if spread >= thresholds.spread:
        return Tier.MEDIOCRE
    return Tier.NEUTRAL


def classify_change(change: Optional[float]) -> Tier:
    """Non-negative changes are favorable, negative ones unfavorable."""
    if _is_undefined(change):
        return Tier.NOT_APPLICABLE
    if change >= 0:
        return Tier.FAVORABLE
    return Tier.UNFAVORABLE
