"""
Screener orchestration.

Drives one screening run through three states:

    RESOLVING  watched instruments -> daily markets -> streamed token IDs
    STREAMING  book events -> metrics + reference change -> correlation table
    DONE       the table is handed to the renderer

Streaming ends when every instrument has reported a book snapshot, when
the first non-book event arrives, when the stream closes on its own, or when
the optional session timeout expires. Any ScreenerError aborts the run.
"""

import logging
import math
import threading
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, List, Optional

from ..errors import ConfigurationError
from .metrics import derive_metrics
from .models import BookUpdateEvent, DerivedMetrics, ResolvedMarket, WatchedInstrument
from .tracking import AssetIdentifierIndex, CompletionGate, CorrelationTable

if TYPE_CHECKING:
    from ..config import ScreenerConfig

logger = logging.getLogger(__name__)


class ScreenerState(Enum):
    """Lifecycle state of a screening run."""

    RESOLVING = "resolving"
    STREAMING = "streaming"
    DONE = "done"

    def __str__(self) -> str:
        return self.value


@dataclass
class ScreenResult:
    """
    Outcome of a screening run.

    Attributes:
        symbols: Watched instruments, in configured order.
        markets: Resolved markets, same order.
        metrics: Metrics per instrument (None where no snapshot arrived).
        complete: Whether every instrument reported.
        timed_out: Whether the session timeout cut the stream short.
    """

    symbols: List[WatchedInstrument]
    markets: List[ResolvedMarket]
    metrics: List[Optional[DerivedMetrics]]
    complete: bool
    timed_out: bool = False

    @property
    def filled_count(self) -> int:
        return sum(1 for m in self.metrics if m is not None)


class Screener:
    """
    Correlates a book snapshot stream with the configured watch-list.

    Collaborators are injected so each can be swapped for a fake:
    - gamma_client.resolve_market(instrument, date) -> ResolvedMarket
    - stream.stream(token_ids, handler, timeout) -> timed_out flag
    - reference_client.get_change(ticker) -> percent change; required
      unless reference lookups are disabled

    Example:
        screener = Screener(config, GammaClient(), CLOBWebSocket(), YahooFinanceClient())
        result = screener.run()
    """

    def __init__(
        self,
        config: "ScreenerConfig",
        gamma_client: Any,
        stream: Any,
        reference_client: Any = None,
    ):
        if config.reference_enabled and reference_client is None:
            raise ConfigurationError("Reference lookups are enabled but no reference client was given")

        self.config = config
        self.gamma_client = gamma_client
        self.stream = stream
        self.reference_client = reference_client

        self.symbols = list(config.symbols)
        self.state = ScreenerState.RESOLVING
        self.markets: List[ResolvedMarket] = []
        self.index: Optional[AssetIdentifierIndex] = None
        self.table = CorrelationTable(len(self.symbols))
        self.gate = CompletionGate(len(self.symbols))

        self.unknown_asset_count = 0
        # One event in flight at a time
        self._lock = threading.Lock()

    def resolve(self) -> List[ResolvedMarket]:
        """
        Resolve every watched instrument, in configured order.

        Raises:
            ResolutionError: If any instrument cannot be resolved
        """
        target_date = self.config.target_date
        logger.info(f"Resolving {len(self.symbols)} markets for {target_date.isoformat()}")

        markets = [
            self.gamma_client.resolve_market(instrument, target_date)
            for instrument in self.symbols
        ]
        self.index = AssetIdentifierIndex.from_markets(markets)
        self.markets = markets
        return markets

    def lookup_change(self, instrument: WatchedInstrument) -> float:
        """
        Fetch the reference price change for an instrument.

        Returns NaN without a request when reference lookups are disabled.

        Raises:
            ReferenceLookupError: If the lookup fails
        """
        if not self.config.reference_enabled:
            return math.nan
        return self.reference_client.get_change(instrument.reference_ticker)

    def handle_event(self, event: BookUpdateEvent) -> bool:
        """
        Process one streamed event.

        Returns:
            True to keep streaming, False to stop
        """
        with self._lock:
            if self.state != ScreenerState.STREAMING:
                return False

            if not event.is_book:
                logger.info(f"Received {event.event_type or 'untyped'} event, stopping stream")
                return False

            index = self.index.lookup(event.asset_id)
            if index is None:
                self.unknown_asset_count += 1
                logger.warning(f"Unknown asset ID: {event.asset_id}")
                return True

            instrument = self.symbols[index]
            if self.table.is_filled(index):
                logger.debug(f"{instrument.symbol} already filled, ignoring update")
                return self.gate.should_continue()

            metrics = derive_metrics(event, self.config.mode)
            change = self.lookup_change(instrument)
            self.table.write(index, replace(metrics, change=change))
            self.gate.record(index)

            logger.info(
                f"{instrument.symbol}: bid={metrics.best_bid} ask={metrics.best_ask} "
                f"({self.gate.filled_count}/{self.gate.total})"
            )
            return self.gate.should_continue()

    def run(self) -> ScreenResult:
        """
        Run the screener from resolution to a finished table.

        Returns:
            ScreenResult with rows in configured order

        Raises:
            ScreenerError: On any fatal condition
        """
        self.state = ScreenerState.RESOLVING
        self.resolve()

        self.state = ScreenerState.STREAMING
        logger.info(f"Streaming order books for {len(self.index)} tokens")
        try:
            timed_out = self.stream.stream(
                self.index.asset_ids,
                self.handle_event,
                timeout=self.config.session_timeout,
            )
        finally:
            with self._lock:
                self.state = ScreenerState.DONE

        if not self.gate.is_complete:
            logger.warning(
                f"Stream ended with {self.gate.filled_count}/{self.gate.total} instruments filled"
            )

        return ScreenResult(
            symbols=self.symbols,
            markets=self.markets,
            metrics=self.table.snapshot(),
            complete=self.gate.is_complete,
            timed_out=bool(timed_out),
        )
