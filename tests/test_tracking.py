"""
Tests for the per-run tracking state.

Tests cover:
- AssetIdentifierIndex construction, lookup and unknown IDs
- CorrelationTable writes, overwrites and ordering
- CompletionGate counting and duplicate fills
"""

from decimal import Decimal

import pytest

from updown_screener.errors import ResolutionError
from updown_screener.screener.models import DerivedMetrics, MetricMode, ResolvedMarket, WatchedInstrument
from updown_screener.screener.tracking import AssetIdentifierIndex, CompletionGate, CorrelationTable


def market(symbol, *token_ids):
    return ResolvedMarket(
        instrument=WatchedInstrument(symbol),
        slug=f"{symbol.lower()}-up-or-down-on-october-17-2026",
        token_ids=token_ids,
    )


def metrics(bid="0.40", ask="0.60"):
    return DerivedMetrics(mode=MetricMode.BID_ASK, best_bid=Decimal(bid), best_ask=Decimal(ask))


# =============================================================================
# AssetIdentifierIndex
# =============================================================================


class TestAssetIdentifierIndex:
    """Tests for token ID -> position mapping."""

    @pytest.fixture
    def index(self):
        return AssetIdentifierIndex.from_markets([
            market("A", "a-up", "a-down"),
            market("B", "b-up", "b-down"),
            market("C", "c-up", "c-down"),
        ])

    def test_lookup_primary_tokens(self, index):
        assert index.lookup("a-up") == 0
        assert index.lookup("b-up") == 1
        assert index.lookup("c-up") == 2

    def test_unknown_id_is_none(self, index):
        assert index.lookup("zzz") is None

    def test_secondary_tokens_are_not_indexed(self, index):
        """Only the streamed (first) outcome token is watched."""
        assert index.lookup("a-down") is None

    def test_asset_ids_in_watch_list_order(self, index):
        assert index.asset_ids == ["a-up", "b-up", "c-up"]
        assert len(index) == 3

    def test_shared_token_raises(self):
        with pytest.raises(ResolutionError, match="already used by A"):
            AssetIdentifierIndex.from_markets([
                market("A", "same", "a-down"),
                market("B", "same", "b-down"),
            ])


# =============================================================================
# CorrelationTable
# =============================================================================


class TestCorrelationTable:
    """Tests for the fixed-size metrics table."""

    def test_starts_empty(self):
        table = CorrelationTable(3)
        assert len(table) == 3
        assert not any(table.is_filled(i) for i in range(3))
        assert table.snapshot() == [None, None, None]

    def test_write_fills_slot(self):
        table = CorrelationTable(2)
        table.write(1, metrics())

        assert table.is_filled(1)
        assert not table.is_filled(0)
        assert table.snapshot()[1].best_bid == Decimal("0.40")

    def test_rows_keep_index_order_regardless_of_write_order(self):
        table = CorrelationTable(2)
        table.write(1, metrics(bid="0.40"))
        table.write(0, metrics(bid="0.20"))

        rows = table.snapshot()
        assert rows[0].best_bid == Decimal("0.20")
        assert rows[1].best_bid == Decimal("0.40")

    def test_second_write_overwrites(self):
        table = CorrelationTable(1)
        table.write(0, metrics(bid="0.40"))
        table.write(0, metrics(bid="0.45"))

        assert table.snapshot()[0].best_bid == Decimal("0.45")

    @pytest.mark.parametrize("index", [-1, 2, 10])
    def test_out_of_range(self, index):
        table = CorrelationTable(2)
        with pytest.raises(IndexError):
            table.write(index, metrics())
        with pytest.raises(IndexError):
            table.is_filled(index)


# =============================================================================
# CompletionGate
# =============================================================================


class TestCompletionGate:
    """Tests for the stop condition."""

    def test_continues_until_every_instrument_filled(self):
        gate = CompletionGate(total=3)
        assert gate.should_continue()

        gate.record(2)
        assert gate.should_continue()
        gate.record(0)
        assert gate.should_continue()
        gate.record(1)
        assert not gate.should_continue()
        assert gate.is_complete

    def test_duplicates_do_not_count(self):
        gate = CompletionGate(total=2)
        assert gate.record(0) is True
        assert gate.record(0) is False
        assert gate.record(0) is False

        assert gate.filled_count == 1
        assert gate.should_continue()

    def test_single_instrument(self):
        gate = CompletionGate(total=1)
        gate.record(0)
        assert not gate.should_continue()

    def test_empty_watch_list_is_complete(self):
        assert not CompletionGate(total=0).should_continue()
