"""
Centralized configuration constants for the investor watchlist application.

The Graham formula coefficients and the default calculator row live here so
the valuation and watchlist modules share one source of truth.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class ValuationDefaults:
    """Coefficients of the revised Graham intrinsic value formula."""

    NO_GROWTH_PE: float = 8.5
    GROWTH_MULTIPLIER: float = 2.0
    HISTORICAL_AAA_YIELD: float = 4.4

    # Used when the AAA yield field cannot be parsed
    FALLBACK_AAA_YIELD: float = 4.8
    FALLBACK_NUMBER: float = 0.0


@dataclass(frozen=True)
class WatchlistDefaults:
    """Persistence and snapshot settings for the watchlist."""

    STORAGE_KEY: str = "investor_watchlist"
    STORAGE_DIR: str = ".investor"
    SQLITE_FILENAME: str = "investor.db"
    ROUND_DECIMALS: int = 2


@dataclass(frozen=True)
class DefaultInputRow:
    """Values the calculator form starts with."""

    TICKER: str = "DAL"
    EPS: float = 6.9
    GROWTH_PCT: float = 10
    AAA_CURRENT_YIELD: float = 4.8
    PRICE: float = 56.65
    MOS_TARGET_PCT: float = 35


@dataclass(frozen=True)
class DisplayConfig:
    """Render-time formatting settings."""

    CURRENCY_SYMBOL: str = "$"
    DECIMAL_PLACES: int = 2


# Global configuration instance
VALUATION_DEFAULTS = ValuationDefaults()
WATCHLIST_DEFAULTS = WatchlistDefaults()
DEFAULT_INPUT_ROW = DefaultInputRow()
DISPLAY_CONFIG = DisplayConfig()


def get_config_summary() -> Dict[str, Any]:
    """Get a summary of all configuration values for debugging."""
    return {
        "valuation_defaults": VALUATION_DEFAULTS.__dict__,
        "watchlist_defaults": WATCHLIST_DEFAULTS.__dict__,
        "default_input_row": DEFAULT_INPUT_ROW.__dict__,
        "display_config": DISPLAY_CONFIG.__dict__,
    }
