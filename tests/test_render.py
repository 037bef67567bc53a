"""Tests for table rows and terminal rendering."""

import io
import math
from decimal import Decimal

import pytest
from rich.console import Console

from updown_screener.screener.classifier import Thresholds, Tier
from updown_screener.screener.models import DerivedMetrics, MetricMode, WatchedInstrument
from updown_screener.screener.render import (
    build_row,
    build_rows,
    format_change,
    format_price,
    render_table,
)


@pytest.fixture
def thresholds():
    return Thresholds(good=Decimal("0.75"))


def metrics(mode, bid="0.30", ask="0.55", change=1.0):
    return DerivedMetrics(
        mode=mode,
        best_bid=Decimal(bid) if bid is not None else None,
        best_ask=Decimal(ask) if ask is not None else None,
        change=change,
    )


class TestFormatting:
    def test_price_two_decimals(self):
        assert format_price(Decimal("0.5")) == "0.50"
        assert format_price(Decimal("0.125")) == "0.13"

    def test_missing_price(self):
        assert format_price(None) == "N/A"

    def test_change_has_explicit_sign(self):
        assert format_change(1.234) == "+1.23%"
        assert format_change(-0.5) == "-0.50%"
        assert format_change(0.0) == "+0.00%"

    def test_missing_change(self):
        assert format_change(math.nan) == "-"
        assert format_change(None) == "-"


class TestBuildRow:
    """Tests for projecting metrics onto cells and tiers."""

    def test_yes_no_after_rise(self, thresholds):
        row = build_row(WatchedInstrument("NVDA"), metrics(MetricMode.YES_NO), MetricMode.YES_NO, thresholds)

        assert row.symbol == "NVDA"
        assert row.cells == ("0.55", "0.70", "0.25", "+1.00%")
        assert row.tiers == (Tier.FAVORABLE, Tier.NEUTRAL, Tier.NEUTRAL, Tier.FAVORABLE)

    def test_yes_no_after_fall(self, thresholds):
        row = build_row(
            WatchedInstrument("NVDA"),
            metrics(MetricMode.YES_NO, change=-2.0),
            MetricMode.YES_NO,
            thresholds,
        )

        assert row.tiers == (Tier.NEUTRAL, Tier.FAVORABLE, Tier.NEUTRAL, Tier.UNFAVORABLE)

    def test_bid_ask_after_fall(self, thresholds):
        """The bid column is judged by the Down cost it implies (1 - 0.30 = 0.70)."""
        row = build_row(
            WatchedInstrument("SPX"),
            metrics(MetricMode.BID_ASK, change=-1.0),
            MetricMode.BID_ASK,
            thresholds,
        )

        assert row.cells == ("0.30", "0.55", "0.25", "-1.00%")
        assert row.tiers[:2] == (Tier.FAVORABLE, Tier.NEUTRAL)

    def test_without_reference_change(self, thresholds):
        row = build_row(
            WatchedInstrument("SPX"),
            metrics(MetricMode.YES_NO, change=math.nan),
            MetricMode.YES_NO,
            thresholds,
        )

        assert row.cells[3] == "-"
        assert row.tiers == (Tier.NOT_APPLICABLE, Tier.NOT_APPLICABLE, Tier.NEUTRAL, Tier.NOT_APPLICABLE)

    def test_empty_side(self, thresholds):
        row = build_row(
            WatchedInstrument("SPX"),
            metrics(MetricMode.YES_NO, bid=None),
            MetricMode.YES_NO,
            thresholds,
        )

        assert row.cells == ("0.55", "N/A", "N/A", "+1.00%")

    def test_unfilled_instrument(self, thresholds):
        row = build_row(WatchedInstrument("TSLA"), None, MetricMode.YES_NO, thresholds)

        assert row.cells == ("N/A", "N/A", "N/A", "-")
        assert set(row.tiers) == {Tier.NOT_APPLICABLE}

    def test_rows_follow_watch_list(self, thresholds):
        symbols = [WatchedInstrument("A"), WatchedInstrument("B")]
        rows = build_rows(symbols, [None, metrics(MetricMode.YES_NO)], MetricMode.YES_NO, thresholds)

        assert [r.symbol for r in rows] == ["A", "B"]
        assert rows[0].cells[0] == "N/A"
        assert rows[1].cells[0] == "0.55"


class TestRenderTable:
    def render(self, rows, mode, color=False):
        buffer = io.StringIO()
        console = Console(file=buffer, width=100, no_color=not color, highlight=False)
        render_table(rows, mode, color=color, console=console)
        return buffer.getvalue()

    def test_yes_no_headers(self, thresholds):
        rows = build_rows(
            [WatchedInstrument("NVDA"), WatchedInstrument("TSLA")],
            [metrics(MetricMode.YES_NO), None],
            MetricMode.YES_NO,
            thresholds,
        )

        output = self.render(rows, MetricMode.YES_NO)

        for header in ("Symbol", "Yes Price", "No Price", "Spread", "Change"):
            assert header in output
        assert "NVDA" in output
        assert "+1.00%" in output
        assert "N/A" in output
        assert output.index("NVDA") < output.index("TSLA")

    def test_bid_ask_headers(self, thresholds):
        rows = build_rows([WatchedInstrument("SPX")], [metrics(MetricMode.BID_ASK)], MetricMode.BID_ASK, thresholds)

        output = self.render(rows, MetricMode.BID_ASK)

        assert "Best Bid" in output
        assert "Best Ask" in output

    def test_no_escape_codes_without_color(self, thresholds):
        rows = build_rows([WatchedInstrument("SPX")], [metrics(MetricMode.YES_NO)], MetricMode.YES_NO, thresholds)
        assert "\x1b[" not in self.render(rows, MetricMode.YES_NO)
