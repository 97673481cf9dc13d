"""
Calculator session.

Holds the mutable "current input" of the calculator form and routes the
presentation layer's events (field edits, save, edit, cancel, delete) to the
valuation engine and the watchlist store. Valuations are recomputed on every
read of ``result``; nothing is cached.
"""

from typing import Dict, Optional

from .config.constants import DISPLAY_CONFIG
from .config.loader import load_app_config, load_default_config
from .config.logging_config import get_logger, setup_logging_from_config
from .formatting import action_label, format_currency, format_percent
from .valuation.base import RawValue, StockInput, ValuationResult
from .valuation.graham import evaluate
from .watchlist.models import WatchlistEntry
from .watchlist.store import WatchlistStore, get_watchlist_store

logger = get_logger(__name__)


class CalculatorSession:
    """Presentation-facing controller for one user's calculator and watchlist."""

    def __init__(self, store: WatchlistStore, reset_form_on_save: bool = False,
                 currency_symbol: str = DISPLAY_CONFIG.CURRENCY_SYMBOL):
        self.store = store
        self.reset_form_on_save = reset_form_on_save
        self.currency_symbol = currency_symbol
        self.current = StockInput.default()

    @classmethod
    def from_config(cls, store: WatchlistStore, config) -> "CalculatorSession":
        return cls(
            store,
            reset_form_on_save=config.reset_form_on_save,
            currency_symbol=config.valuation.currency_symbol,
        )

    def set_field(self, name: str, raw: RawValue) -> ValuationResult:
        """Apply one raw field edit and return the recomputed valuation."""
        self.current = self.current.with_field(name, raw)
        return self.result

    @property
    def result(self) -> ValuationResult:
        return evaluate(self.current)

    def reset(self) -> None:
        self.current = StockInput.default()

    def save(self) -> WatchlistEntry:
        """Save the current input: updates the entry under edit, otherwise adds one."""
        entry = self.store.submit(self.current, self.result)
        if self.reset_form_on_save:
            self.reset()
        return entry

    def edit(self, index: int) -> bool:
        """Load a saved entry's inputs into the form. False if ``index`` is invalid."""
        stock = self.store.begin_edit(index)
        if stock is None:
            logger.debug(f"No watchlist entry at index {index} to edit")
            return False
        self.current = stock
        return True

    def cancel_edit(self) -> None:
        self.store.cancel_edit()

    def delete(self, index: int) -> bool:
        return self.store.delete(index)

    @property
    def editing_index(self) -> Optional[int]:
        return self.store.editing_index

    def summary(self) -> Dict[str, str]:
        """Formatted figures for the result panel."""
        result = self.result
        return {
            'ticker': str(self.current.ticker or ""),
            'intrinsic_value': format_currency(result.intrinsic_value, self.currency_symbol),
            'acceptable_buy_price': format_currency(result.acceptable_buy_price, self.currency_symbol),
            'diff_pct': format_percent(result.diff_pct),
            'action': action_label(result.action),
            'save_label': "Update Watch Item" if self.store.is_editing else "Save to Watchlist",
        }


def open_session(config_path=None) -> CalculatorSession:
    """
    Start-up: configure logging, load the watchlist and return a fresh session.

    Parameters
    ----------
    config_path : str or Path, optional
        YAML configuration; the bundled default is used when omitted
    """
    config = load_app_config(config_path) if config_path else load_default_config()
    setup_logging_from_config(config)
    store = get_watchlist_store(config)
    logger.info(f"Session opened with {len(store)} saved watchlist entries")
    return CalculatorSession.from_config(store, config)
