"""Configuration management for the Polymarket Up/Down screener."""
import os
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from dotenv import load_dotenv

from .errors import ConfigurationError
from .screener.classifier import Thresholds
from .screener.models import MetricMode, WatchedInstrument

# Load environment variables
load_dotenv()

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

LOGS_DIR = Path(os.getenv("SCREENER_LOGS_DIR", str(PROJECT_ROOT / "logs")))

CONFIGURATION_PATH = Path(
    os.getenv("SCREENER_CONFIGURATION", "configuration/configuration.yaml")
)

# =============================================================================
# API ENDPOINTS
# =============================================================================

GAMMA_API_URL = os.getenv("GAMMA_API_URL", "https://gamma-api.polymarket.com")
WS_URL = os.getenv("CLOB_WS_URL", "wss://ws-subscriptions-clob.polymarket.com/ws/market")
YAHOO_CHART_URL = os.getenv(
    "YAHOO_CHART_URL", "https://query1.finance.yahoo.com/v8/finance/chart"
)

# Seconds before an HTTP request is abandoned
HTTP_TIMEOUT = float(os.getenv("SCREENER_HTTP_TIMEOUT", "10"))

# Seconds between websocket keep-alive pings
WS_PING_INTERVAL = float(os.getenv("SCREENER_WS_PING_INTERVAL", "10"))

# =============================================================================
# SCREENER DEFAULTS
# =============================================================================

DEFAULT_GOOD_PRICE = "0.75"
DEFAULT_SPREAD_BOUND = "0.05"


@dataclass(frozen=True)
class ScreenerConfig:
    """
    Explicit configuration for one screener run.

    Built once at process start (from YAML plus command line overrides) and
    handed to the Screener; nothing reads configuration from module state
    after that.

    Attributes:
        symbols: Watched instruments, in display order.
        mode: Metric derivation mode.
        thresholds: Highlight bounds for price and spread cells.
        reference_enabled: Whether to fetch the reference price change.
        color: Whether to colorize the rendered table.
        session_timeout: Seconds to wait for the book stream (None = forever).
        target_date: Date used to build market slugs.
    """

    symbols: Tuple[WatchedInstrument, ...]
    mode: MetricMode = MetricMode.YES_NO
    thresholds: Thresholds = field(
        default_factory=lambda: Thresholds(good=Decimal(DEFAULT_GOOD_PRICE))
    )
    reference_enabled: bool = True
    color: bool = True
    session_timeout: Optional[float] = None
    target_date: date = field(default_factory=date.today)

    def with_overrides(self, **overrides: Any) -> "ScreenerConfig":
        """Return a copy with the non-None overrides applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


def _parse_decimal(value: Any, name: str) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        raise ConfigurationError(f"Invalid decimal for {name}: {value!r}")


def _parse_symbols(raw: Any) -> Tuple[WatchedInstrument, ...]:
    if not isinstance(raw, list) or not raw:
        raise ConfigurationError("Configuration must list at least one symbol")

    symbols: List[WatchedInstrument] = []
    for entry in raw:
        if isinstance(entry, str):
            entry = {"symbol": entry}
        if not isinstance(entry, dict) or not entry.get("symbol"):
            raise ConfigurationError(f"Invalid symbol entry: {entry!r}")
        alias = entry.get("yahoo") or entry.get("alias") or None
        symbols.append(WatchedInstrument(symbol=str(entry["symbol"]), alias=alias))
    return tuple(symbols)


def _parse_thresholds(raw: Any) -> Thresholds:
    raw = raw or {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Invalid thresholds section: {raw!r}")

    return Thresholds(
        good=_parse_decimal(raw.get("good", DEFAULT_GOOD_PRICE), "thresholds.good"),
        mediocre=_parse_decimal(raw.get("mediocre"), "thresholds.mediocre"),
        spread=_parse_decimal(raw.get("spread", DEFAULT_SPREAD_BOUND), "thresholds.spread"),
        spread_colors=bool(raw.get("spread_colors", False)),
    )


def config_from_dict(data: Dict[str, Any]) -> ScreenerConfig:
    """
    Build a ScreenerConfig from parsed YAML data.

    Args:
        data: Mapping with a ``symbols`` list and optional settings

    Returns:
        ScreenerConfig

    Raises:
        ConfigurationError: If a value is missing or malformed
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration root must be a mapping")

    try:
        mode = MetricMode(data.get("mode", MetricMode.YES_NO.value))
    except ValueError:
        raise ConfigurationError(f"Unknown mode: {data.get('mode')!r}")

    timeout = data.get("session_timeout")
    if timeout is not None:
        try:
            timeout = float(timeout)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Invalid session_timeout: {timeout!r}")

    return ScreenerConfig(
        symbols=_parse_symbols(data.get("symbols")),
        mode=mode,
        thresholds=_parse_thresholds(data.get("thresholds")),
        reference_enabled=bool(data.get("reference", True)),
        color=bool(data.get("color", True)),
        session_timeout=timeout,
    )


def load_config(path: Optional[Path] = None) -> ScreenerConfig:
    """Load the screener configuration from a YAML file."""
    path = Path(path or CONFIGURATION_PATH)
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {path}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Failed to parse {path}: {e}")

    return config_from_dict(data)


def resolve_target_date(
    date_string: Optional[str] = None,
    tomorrow: bool = False,
    today: Optional[date] = None,
) -> date:
    """
    Pick the date whose daily markets should be screened.

    An explicit date string wins over the tomorrow flag.

    Args:
        date_string: Date in YYYY-MM-DD format
        tomorrow: Shift today's date by one day
        today: Reference date (defaults to the local date)

    Returns:
        Target date
    """
    if date_string:
        try:
            return datetime.strptime(date_string, "%Y-%m-%d").date()
        except ValueError:
            raise ConfigurationError(f"Invalid date {date_string!r}, expected YYYY-MM-DD")

    today = today or date.today()
    if tomorrow:
        return today + timedelta(days=1)
    return today
