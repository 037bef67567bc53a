#!/usr/bin/env python3
"""
Run the Up/Down Screener

Resolves the configured watch-list to today's (or tomorrow's) daily
"Up or Down" markets, waits for one order book snapshot per market and
prints the comparison table.

Usage:
    # Today's markets
    python scripts/run_screener.py

    # Tomorrow's markets (after the session close)
    python scripts/run_screener.py --tomorrow

    # Best bid/ask instead of yes/no prices, no color
    python scripts/run_screener.py --mode bid_ask --no-color

    # Stop waiting for books after 45 seconds
    python scripts/run_screener.py --timeout 45

Configuration:
    configuration/configuration.yaml - watch-list and thresholds
    .env - optional endpoint overrides (GAMMA_API_URL, CLOB_WS_URL, ...)
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from updown_screener.cli import main


if __name__ == "__main__":
    sys.exit(main())
