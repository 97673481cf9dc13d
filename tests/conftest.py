"""
Pytest configuration and shared fixtures for the investor watchlist test suite.
"""
import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from investor.error_handling import error_handler  # noqa: E402
from investor.storage.backends import MemoryStorage  # noqa: E402
from investor.valuation.base import StockInput  # noqa: E402
from investor.watchlist.store import WatchlistStore, reset_watchlist_store  # noqa: E402


@pytest.fixture(autouse=True)
def clean_global_state():
    """Each test starts with an empty error history and no watchlist singleton."""
    error_handler.clear_history()
    reset_watchlist_store()
    yield
    reset_watchlist_store()


@pytest.fixture
def delta_input():
    """The calculator's starting row (Delta Air Lines)."""
    return StockInput(
        ticker='DAL',
        eps=6.9,
        growth_pct=10,
        aaa_current_yield=4.8,
        price=56.65,
        mos_target_pct=35,
    )


@pytest.fixture
def expensive_input():
    """A stock trading well above its Graham value."""
    return StockInput(
        ticker='EXPN',
        eps='2.00',
        growth_pct='5',
        aaa_current_yield='4.4',
        price='80',
        mos_target_pct='25',
    )


@pytest.fixture
def fixed_clock():
    """Clock frozen at one instant, so every save happens in the same millisecond."""
    return lambda: 1_700_000_000_000


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def store(memory_storage, fixed_clock):
    return WatchlistStore(memory_storage, clock=fixed_clock)


@pytest.fixture
def legacy_payload():
    """Watchlist exactly as the browser app wrote it to localStorage."""
    return (
        '[{"ticker":"MSFT","eps":"11.8","growthPct":"12","aaaCurrentYield":4.8,'
        '"price":"410","mosTargetPct":35,'
        '"intrinsicValue":354.62,"acceptableBuyPrice":230.5,"diffPct":-13.51,'
        '"action":"HOLD / AVOID","ts":1717000000000},'
        '{"ticker":"DAL","eps":6.9,"growthPct":10,"aaaCurrentYield":4.8,'
        '"price":56.65,"mosTargetPct":35,"intrinsicValue":180.26,'
        '"acceptableBuyPrice":117.17,"diffPct":218.2,"action":"BUY (meets MOS)",'
        '"ts":1716000000000}]'
    )
