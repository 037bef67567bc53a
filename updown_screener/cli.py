"""
Command-line interface for the Up/Down screener.

Usage:
    # Today's daily markets
    updown-screener

    # Tomorrow's markets, for use after the session close
    updown-screener --tomorrow

    # A specific date, bid/ask columns, no Yahoo lookups
    updown-screener --date 2026-10-19 --mode bid_ask --no-reference

    # Give up waiting for books after 30 seconds
    updown-screener --timeout 30

The table goes to stdout; logs go to stderr and logs/screener_*.log.
Exits 1 on any fatal error (unresolvable market, malformed price, failed
reference lookup) without printing a table.
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .api import CLOBWebSocket, GammaClient, YahooFinanceClient
from .config import LOGS_DIR, ScreenerConfig, load_config, resolve_target_date
from .errors import ScreenerError
from .screener import MetricMode, Screener, build_rows, render_table

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_INTERRUPTED = 130


def setup_logging(verbose: bool = False, log_dir: Path = LOGS_DIR) -> Path:
    """Configure console (stderr) and per-run file logging."""
    level = logging.DEBUG if verbose else logging.INFO

    console_format = "%(asctime)s [%(levelname)s] %(message)s"
    file_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(console_format, datefmt="%H:%M:%S"))

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"screener_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(file_format))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    # Reduce noise from external libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("websocket").setLevel(logging.WARNING)

    return log_file


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="updown-screener",
        description="Screen Polymarket daily Up/Down markets against the underlying's move",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the YAML watch-list (default: configuration/configuration.yaml)",
    )
    parser.add_argument(
        "--date",
        default=None,
        help="Screen the markets of this date (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--tomorrow",
        action="store_true",
        help="Run screener for tomorrow's daily markets, for use after session close",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in MetricMode],
        default=None,
        help="Show yes/no prices or best bid/ask (default: from config)",
    )
    parser.add_argument(
        "--no-reference",
        action="store_true",
        help="Skip the Yahoo Finance price change lookup",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for order books before rendering what arrived",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ScreenerConfig:
    """Load the YAML configuration and apply command line overrides."""
    config = load_config(args.config)
    return config.with_overrides(
        target_date=resolve_target_date(args.date, args.tomorrow),
        mode=MetricMode(args.mode) if args.mode else None,
        reference_enabled=False if args.no_reference else None,
        color=False if args.no_color else None,
        session_timeout=args.timeout,
    )


def run(config: ScreenerConfig) -> None:
    """Run one screening session and print the table."""
    reference_client = YahooFinanceClient() if config.reference_enabled else None
    screener = Screener(config, GammaClient(), CLOBWebSocket(), reference_client)
    result = screener.run()

    rows = build_rows(result.symbols, result.metrics, config.mode, config.thresholds)
    render_table(rows, config.mode, color=config.color)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = build_config(args)
        run(config)
    except ScreenerError as e:
        logger.error(str(e))
        return EXIT_FATAL
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return EXIT_INTERRUPTED

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
