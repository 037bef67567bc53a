"""
Screener core: streaming correlation and completion.

This module provides:
- Metric derivation from order book levels
- Threshold classification of prices and spreads
- Per-run tracking (asset index, correlation table, completion gate)
- The Screener orchestrator
- Table rendering
"""

from .models import (
    BookUpdateEvent,
    DerivedMetrics,
    MetricMode,
    PriceLevel,
    ResolvedMarket,
    WatchedInstrument,
)
from .metrics import best_price, derive_metrics, parse_price
from .classifier import Direction, Thresholds, Tier, classify, classify_change, classify_spread
from .tracking import AssetIdentifierIndex, CompletionGate, CorrelationTable
from .orchestrator import Screener, ScreenerState, ScreenResult
from .render import ScreenerRow, build_rows, render_table

__all__ = [
    # Models
    "BookUpdateEvent",
    "DerivedMetrics",
    "MetricMode",
    "PriceLevel",
    "ResolvedMarket",
    "WatchedInstrument",
    # Metric derivation
    "best_price",
    "derive_metrics",
    "parse_price",
    # Classification
    "Direction",
    "Thresholds",
    "Tier",
    "classify",
    "classify_change",
    "classify_spread",
    # Tracking
    "AssetIdentifierIndex",
    "CompletionGate",
    "CorrelationTable",
    # Orchestration
    "Screener",
    "ScreenerState",
    "ScreenResult",
    # Rendering
    "ScreenerRow",
    "build_rows",
    "render_table",
]
