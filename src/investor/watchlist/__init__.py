"""
Watchlist Package

Saved valuation snapshots with create / update / delete semantics and
best-effort persistence to a durable key-value store.
"""

from .models import WatchlistEntry, decode_entries, encode_entries
from .store import WatchlistStore, get_watchlist_store, reset_watchlist_store

__all__ = [
    'WatchlistEntry',
    'WatchlistStore',
    'decode_entries',
    'encode_entries',
    'get_watchlist_store',
    'reset_watchlist_store',
]
