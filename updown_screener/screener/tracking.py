"""
Per-run tracking state for the streaming session.

- AssetIdentifierIndex: streamed token ID -> position of its instrument
- CorrelationTable: one metrics slot per instrument, in configured order
- CompletionGate: counts distinct filled instruments, says when to stop

All three are addressed by the same index: the position of the instrument in
the configured watch-list. Events may arrive in any order; rows are always
read back in configured order.
"""

import threading
from typing import Dict, List, Optional, Sequence, Set

from ..errors import ResolutionError
from .models import DerivedMetrics, ResolvedMarket


class AssetIdentifierIndex:
    """
    Maps streamed outcome token IDs back to watch-list positions.

    Example:
        index = AssetIdentifierIndex.from_markets(markets)
        position = index.lookup(event.asset_id)
        if position is None:
            ...  # not one of ours
    """

    def __init__(self, positions: Dict[str, int]):
        self._positions = dict(positions)

    @classmethod
    def from_markets(cls, markets: Sequence[ResolvedMarket]) -> "AssetIdentifierIndex":
        """
        Build the index from resolved markets, one streamed token per market.

        Raises:
            ResolutionError: If two markets share a token ID
        """
        positions: Dict[str, int] = {}
        for i, market in enumerate(markets):
            token_id = market.primary_token_id
            if token_id in positions:
                other = markets[positions[token_id]]
                raise ResolutionError(
                    market.instrument.symbol,
                    market.slug,
                    f"token {token_id} already used by {other.instrument.symbol}",
                )
            positions[token_id] = i
        return cls(positions)

    def lookup(self, asset_id: str) -> Optional[int]:
        """Return the position for a token ID, or None when it is not watched."""
        return self._positions.get(asset_id)

    @property
    def asset_ids(self) -> List[str]:
        """Token IDs in watch-list order."""
        return sorted(self._positions, key=self._positions.get)

    def __len__(self) -> int:
        return len(self._positions)


class CorrelationTable:
    """
    Fixed-size table of per-instrument metrics.

    Writes are guarded per table so the stream's delivery thread and a
    reader rendering after a timeout never see a half-updated slot.
    """

    def __init__(self, size: int):
        self._slots: List[Optional[DerivedMetrics]] = [None] * size
        self._lock = threading.Lock()

    def _check(self, index: int) -> None:
        if not 0 <= index < len(self._slots):
            raise IndexError(f"No slot {index} in table of {len(self._slots)}")

    def write(self, index: int, metrics: DerivedMetrics) -> None:
        """Store metrics for an instrument, replacing any earlier value."""
        self._check(index)
        with self._lock:
            self._slots[index] = metrics

    def is_filled(self, index: int) -> bool:
        self._check(index)
        with self._lock:
            return self._slots[index] is not None

    def snapshot(self) -> List[Optional[DerivedMetrics]]:
        """Copy of all slots, in watch-list order."""
        with self._lock:
            return list(self._slots)

    def __len__(self) -> int:
        return len(self._slots)


class CompletionGate:
    """
    Decides whether the stream should keep delivering events.

    Example:
        gate = CompletionGate(total=2)
        gate.record(1)
        gate.should_continue()  # True, 1 of 2
        gate.record(0)
        gate.should_continue()  # False, 2 of 2
    """

    def __init__(self, total: int):
        self.total = total
        self._filled: Set[int] = set()

    def record(self, index: int) -> bool:
        """
        Count an instrument as filled.

        Returns:
            True if the index was not counted before
        """
        if index in self._filled:
            return False
        self._filled.add(index)
        return True

    @property
    def filled_count(self) -> int:
        return len(self._filled)

    @property
    def is_complete(self) -> bool:
        return self.filled_count >= self.total

    def should_continue(self) -> bool:
        return not self.is_complete
