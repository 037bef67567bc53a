"""Terminal rendering of the screener table."""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence, Tuple

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .classifier import Direction, Thresholds, Tier, classify, classify_change, classify_spread
from .models import DerivedMetrics, MetricMode, WatchedInstrument

PRICE_PLACEHOLDER = "N/A"
CHANGE_PLACEHOLDER = "-"

CENT = Decimal("0.01")

HEADERS = {
    MetricMode.YES_NO: ("Symbol", "Yes Price", "No Price", "Spread", "Change"),
    MetricMode.BID_ASK: ("Symbol", "Best Bid", "Best Ask", "Spread", "Change"),
}

TIER_STYLES = {
    Tier.FAVORABLE: "green",
    Tier.MEDIOCRE: "yellow",
    Tier.UNFAVORABLE: "red",
}


@dataclass(frozen=True)
class ScreenerRow:
    """One rendered line: formatted cells after the symbol, with their tiers."""

    symbol: str
    cells: Tuple[str, ...]
    tiers: Tuple[Tier, ...]


def format_price(value: Optional[Decimal]) -> str:
    if value is None:
        return PRICE_PLACEHOLDER
    return str(value.quantize(CENT, rounding=ROUND_HALF_UP))


def format_change(change: Optional[float]) -> str:
    if change is None or math.isnan(change):
        return CHANGE_PLACEHOLDER
    return f"{change:+.2f}%"


def build_row(
    instrument: WatchedInstrument,
    metrics: Optional[DerivedMetrics],
    mode: MetricMode,
    thresholds: Thresholds,
) -> ScreenerRow:
    """
    Project one instrument's metrics onto table cells.

    The second and third columns are the two sides of the market. The Up
    side is only highlighted after the reference rose and the Down side only
    after it fell. In Bid/Ask mode the bid column is judged by the Down cost
    it implies (one minus the bid).
    """
    if metrics is None:
        placeholders = (PRICE_PLACEHOLDER,) * 3 + (CHANGE_PLACEHOLDER,)
        return ScreenerRow(instrument.symbol, placeholders, (Tier.NOT_APPLICABLE,) * 4)

    change = metrics.change
    if mode == MetricMode.YES_NO:
        first, second = metrics.yes_price, metrics.no_price
        first_tier = classify(first, change, Direction.UP, thresholds)
        second_tier = classify(second, change, Direction.DOWN, thresholds)
    else:
        first, second = metrics.best_bid, metrics.best_ask
        first_tier = classify(metrics.no_price, change, Direction.DOWN, thresholds)
        second_tier = classify(metrics.best_ask, change, Direction.UP, thresholds)

    return ScreenerRow(
        symbol=instrument.symbol,
        cells=(
            format_price(first),
            format_price(second),
            format_price(metrics.spread),
            format_change(change),
        ),
        tiers=(
            first_tier,
            second_tier,
            classify_spread(metrics.spread, thresholds),
            classify_change(change),
        ),
    )


def build_rows(
    symbols: Sequence[WatchedInstrument],
    metrics: Sequence[Optional[DerivedMetrics]],
    mode: MetricMode,
    thresholds: Thresholds,
) -> List[ScreenerRow]:
    """Rows in watch-list order, placeholders where no snapshot arrived."""
    return [
        build_row(instrument, row_metrics, mode, thresholds)
        for instrument, row_metrics in zip(symbols, metrics)
    ]


def build_table(rows: Sequence[ScreenerRow], mode: MetricMode, color: bool = True) -> Table:
    """Build a rich Table; tier styles are only applied when color is on."""
    table = Table(box=box.SIMPLE_HEAVY, header_style="bold" if color else "")
    headers = HEADERS[mode]
    table.add_column(headers[0], justify="left")
    for header in headers[1:]:
        table.add_column(header, justify="right")

    for row in rows:
        cells = [Text(row.symbol)]
        for cell, tier in zip(row.cells, row.tiers):
            style = TIER_STYLES.get(tier, "") if color else ""
            cells.append(Text(cell, style=style))
        table.add_row(*cells)
    return table


def render_table(
    rows: Sequence[ScreenerRow],
    mode: MetricMode,
    color: bool = True,
    console: Optional[Console] = None,
) -> None:
    """Print the screener table to standard output."""
    console = console or Console(no_color=not color, highlight=False)
    console.print()
    console.print(build_table(rows, mode, color=color))
