"""
Watchlist store.

Owns the ordered list of saved valuation snapshots (newest first) and keeps
the durable copy in sync: every successful create, update or delete is
followed by a full overwrite of the stored list.

Persistence is best effort. A missing, corrupt or unreadable stored value
loads as an empty watchlist; invalid records inside a valid list are skipped.
A failed write is recorded by the error handler while the in-memory list
stays authoritative for the session.
"""

import time
from typing import Any, Callable, Iterable, Iterator, List, Optional

from ..config.constants import WATCHLIST_DEFAULTS
from ..config.loader import load_default_config
from ..config.logging_config import get_logger, log_watchlist_change
from ..config.schema import AppConfig
from ..error_handling import ErrorHandlingContext, create_error_context, error_handler, handle_errors
from ..exceptions import WatchlistIndexError
from ..storage import create_storage
from ..storage.backends import StorageBackend
from ..valuation.base import StockInput, ValuationResult
from ..valuation.graham import evaluate
from .models import WatchlistEntry, decode_entries, encode_entries

logger = get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class WatchlistStore:
    """
    Ordered collection of WatchlistEntry with durable persistence.

    Editing mode is a single optional index: while it is set, ``submit``
    replaces the entry at that position instead of adding a new one.
    """

    def __init__(
        self,
        storage: StorageBackend,
        key: str = WATCHLIST_DEFAULTS.STORAGE_KEY,
        round_decimals: int = WATCHLIST_DEFAULTS.ROUND_DECIMALS,
        clock: Optional[Callable[[], int]] = None,
    ):
        """
        Create the store and load any previously saved watchlist.

        Parameters
        ----------
        storage : StorageBackend
            Durable key-value store
        key : str
            Key the serialized watchlist lives under
        round_decimals : int
            Decimals kept for the valuation frozen into each entry
        clock : callable, optional
            Returns the current time in epoch milliseconds
        """
        self.storage = storage
        self.key = key
        self.round_decimals = round_decimals
        self._clock = clock or _now_ms
        self._editing_index: Optional[int] = None
        self._entries: List[WatchlistEntry] = self.load()
        self._last_ts = max((entry.ts for entry in self._entries), default=0)

    # Persistence

    def load(self) -> List[WatchlistEntry]:
        """
        Read the stored watchlist.

        An unreadable or malformed payload yields an empty list. Individual
        invalid records are skipped and recorded by the error handler.
        """
        context = create_error_context(operation="load", storage_key=self.key)
        with ErrorHandlingContext(context, reraise=False):
            payload = self.storage.get(self.key)
            if payload is None or not payload.strip():
                logger.debug(f"No stored watchlist under '{self.key}'")
                return []
            entries = decode_entries(payload, on_invalid=self._skip_record)
            logger.info(f"Loaded {len(entries)} watchlist entries from {self.storage.name} storage")
            return entries
        return []

    def _skip_record(self, position: int, record: Any, error: Exception) -> None:
        ticker = record.get("ticker") if isinstance(record, dict) else None
        context = create_error_context(
            operation="load_record",
            ticker=None if ticker is None else str(ticker),
            storage_key=self.key,
            user_input=record if isinstance(record, dict) else {"record": record},
        )
        error_handler.handle_error(
            error, context,
            custom_message=f"Skipped invalid watchlist record at position {position}.",
        )

    def save(self, entries: Optional[Iterable[WatchlistEntry]] = None) -> bool:
        """
        Overwrite durable storage with ``entries`` (the current list by default).

        Returns False when the write failed; the failure is recorded, not raised.
        """
        entries = self._entries if entries is None else list(entries)
        context = create_error_context(operation="save", storage_key=self.key)
        with ErrorHandlingContext(context, reraise=False):
            self.storage.set(self.key, encode_entries(entries))
            return True
        return False

    def reload(self) -> None:
        """Replace the in-memory list with the stored one and leave editing mode."""
        self._entries = self.load()
        self._editing_index = None
        self._last_ts = max([self._last_ts] + [entry.ts for entry in self._entries])

    # Mutations

    def create(self, stock: StockInput, result: Optional[ValuationResult] = None) -> WatchlistEntry:
        """Snapshot ``stock`` and its valuation as a new entry at the front."""
        entry = self._build_entry(stock, result)
        self._entries.insert(0, entry)
        self.save()
        log_watchlist_change(logger, "create", entry.ticker, len(self._entries))
        return entry

    def update(self, index: int, stock: StockInput,
               result: Optional[ValuationResult] = None) -> WatchlistEntry:
        """
        Replace the entry at ``index`` in place.

        Raises
        ------
        WatchlistIndexError
            If ``index`` is not an existing position (negative indexes included)
        """
        if not self._is_valid_index(index):
            raise WatchlistIndexError(index, len(self._entries), "update")

        entry = self._build_entry(stock, result)
        self._entries[index] = entry
        self.save()
        log_watchlist_change(logger, "update", entry.ticker, len(self._entries), index=index)
        return entry

    def delete(self, index: int) -> bool:
        """
        Remove the entry at ``index``.

        Out-of-range positions are ignored and return False. An active edit
        keeps pointing at the same entry, or ends if that entry was removed.
        """
        if not self._is_valid_index(index):
            logger.debug(f"Ignoring delete of index {index} on {len(self._entries)} entries")
            return False

        removed = self._entries.pop(index)
        if self._editing_index is not None:
            if self._editing_index == index:
                self._editing_index = None
            elif self._editing_index > index:
                self._editing_index -= 1

        self.save()
        log_watchlist_change(logger, "delete", removed.ticker, len(self._entries), index=index)
        return True

    def submit(self, stock: StockInput, result: Optional[ValuationResult] = None) -> WatchlistEntry:
        """Save button: update the entry under edit, or create a new one."""
        if self._editing_index is None:
            return self.create(stock, result)

        entry = self.update(self._editing_index, stock, result)
        self._editing_index = None
        return entry

    # Editing mode

    def begin_edit(self, index: int) -> Optional[StockInput]:
        """
        Enter editing mode for ``index`` and return that entry's inputs.

        Returns None, leaving editing mode unchanged, if ``index`` is invalid.
        """
        if not self._is_valid_index(index):
            return None
        self._editing_index = index
        return self._entries[index].stock_input

    def cancel_edit(self) -> None:
        self._editing_index = None

    @property
    def editing_index(self) -> Optional[int]:
        return self._editing_index

    @property
    def is_editing(self) -> bool:
        return self._editing_index is not None

    # Read access

    @property
    def entries(self) -> List[WatchlistEntry]:
        """Copy of the current entries, newest first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[WatchlistEntry]:
        return iter(list(self._entries))

    def __getitem__(self, index: int) -> WatchlistEntry:
        if not self._is_valid_index(index):
            raise WatchlistIndexError(index, len(self._entries))
        return self._entries[index]

    # Internals

    def _is_valid_index(self, index: int) -> bool:
        return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < len(self._entries)

    def _next_timestamp(self) -> int:
        ts = self._clock()
        if ts <= self._last_ts:
            ts = self._last_ts + 1
        self._last_ts = ts
        return ts

    def _build_entry(self, stock: StockInput, result: Optional[ValuationResult]) -> WatchlistEntry:
        if result is None:
            result = evaluate(stock)
        return WatchlistEntry.from_valuation(stock, result, ts=self._next_timestamp(),
                                             decimals=self.round_decimals)


@handle_errors(custom_message="Configuration could not be loaded; using built-in defaults.")
def _load_configuration() -> AppConfig:
    return load_default_config()


# Global watchlist store instance
_watchlist_store: Optional[WatchlistStore] = None


def get_watchlist_store(config: Optional[AppConfig] = None) -> WatchlistStore:
    """Get global watchlist store instance, loading it on first use (singleton pattern)."""
    global _watchlist_store

    if _watchlist_store is None:
        config = config or _load_configuration() or AppConfig()
        _watchlist_store = WatchlistStore(
            storage=create_storage(config.storage),
            key=config.storage.key,
            round_decimals=config.valuation.round_decimals,
        )

    return _watchlist_store


def reset_watchlist_store():
    """Reset global watchlist store (useful for testing)."""
    global _watchlist_store
    _watchlist_store = None
