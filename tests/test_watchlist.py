"""Tests for the watchlist store and its persisted records."""

import json
import sys
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from investor.config.schema import AppConfig  # noqa: E402
from investor.error_handling import ErrorCategory, error_handler  # noqa: E402
from investor.exceptions import StorageError, WatchlistIndexError  # noqa: E402
from investor.storage.backends import FileStorage, MemoryStorage, SqliteStorage  # noqa: E402
from investor.valuation import Action, StockInput, evaluate  # noqa: E402
from investor.watchlist import (  # noqa: E402
    WatchlistEntry,
    WatchlistStore,
    decode_entries,
    encode_entries,
    get_watchlist_store,
    reset_watchlist_store,
)


class FailingWriteStorage(MemoryStorage):
    """Storage whose writes always fail."""

    def set(self, key, value):
        raise StorageError(self.name, key, "disk full")


class FailingReadStorage(MemoryStorage):
    """Storage whose reads always fail."""

    def get(self, key):
        raise StorageError(self.name, key, "permission denied")


def _ticker(symbol, price=50):
    return StockInput(ticker=symbol, eps=3, growth_pct=6, aaa_current_yield=4.8,
                      price=price, mos_target_pct=30)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

class TestLoad:
    def test_missing_key_is_empty(self, store):
        assert len(store) == 0
        assert store.entries == []
        assert error_handler.last_error is None

    @pytest.mark.parametrize('payload', [
        'not json{',
        '{"ticker": "DAL"}',
        '42',
        'null',
    ])
    def test_corrupt_payload_is_empty(self, payload):
        storage = MemoryStorage({'investor_watchlist': payload})
        store = WatchlistStore(storage)

        assert len(store) == 0
        assert error_handler.last_error.category is ErrorCategory.PERSISTENCE
        assert error_handler.last_error.context.operation == 'load'

    @pytest.mark.parametrize('record', [
        {'ticker': 'DAL'},                          # no ts
        {'ticker': 'X', 'ts': 1, 'action': 'SELL'},
        {'ticker': 'B', 'eps': {'x': 1}, 'ts': 2},
        'MSFT',
    ])
    def test_invalid_record_is_skipped(self, record):
        payload = json.dumps([{'ticker': 'A', 'eps': 1, 'ts': 1}, record])
        store = WatchlistStore(MemoryStorage({'investor_watchlist': payload}))

        assert [entry.ticker for entry in store] == ['A']
        assert error_handler.last_error.category is ErrorCategory.PERSISTENCE
        assert error_handler.last_error.context.operation == 'load_record'

    def test_skipped_record_does_not_erase_valid_ones(self, fixed_clock):
        payload = json.dumps([
            {'ticker': 'A', 'eps': 1, 'ts': 1},
            {'ticker': 'B', 'eps': {'x': 1}, 'ts': 2},
            {'ticker': 'C', 'eps': '3', 'ts': 3},
        ])
        storage = MemoryStorage({'investor_watchlist': payload})
        store = WatchlistStore(storage, clock=fixed_clock)
        store.create(_ticker('DAL'))

        persisted = decode_entries(storage.get('investor_watchlist'))
        assert [entry.ticker for entry in persisted] == ['DAL', 'A', 'C']
        assert error_handler.get_error_summary()['total_errors'] == 1

    def test_blank_payload_is_empty(self):
        store = WatchlistStore(MemoryStorage({'investor_watchlist': '   '}))
        assert len(store) == 0
        assert error_handler.last_error is None

    def test_unreadable_storage_is_empty(self):
        store = WatchlistStore(FailingReadStorage())
        assert len(store) == 0
        assert isinstance(error_handler.last_error.exception, StorageError)

    def test_legacy_records_load(self, legacy_payload):
        store = WatchlistStore(MemoryStorage({'investor_watchlist': legacy_payload}))

        assert [entry.ticker for entry in store] == ['MSFT', 'DAL']
        msft, dal = store.entries
        assert msft.action is Action.HOLD_AVOID
        assert msft.eps == '11.8'
        assert dal.action is Action.BUY
        assert dal.intrinsic_value == 180.26
        assert dal.ts == 1716000000000

    def test_custom_key(self, legacy_payload):
        storage = MemoryStorage({'other_list': legacy_payload})
        assert len(WatchlistStore(storage, key='other_list')) == 2
        assert len(WatchlistStore(storage)) == 0


# ---------------------------------------------------------------------------
# Create / update / delete
# ---------------------------------------------------------------------------

class TestCreate:
    def test_newest_first(self, store):
        store.create(_ticker('AAA'))
        store.create(_ticker('BBB'))

        assert store[0].ticker == 'BBB'
        assert store[1].ticker == 'AAA'

    def test_entry_freezes_rounded_valuation(self, store, delta_input):
        entry = store.create(delta_input, evaluate(delta_input))

        assert entry.intrinsic_value == pytest.approx(180.26, abs=0.006)
        assert entry.acceptable_buy_price == 117.17
        assert entry.diff_pct == 218.2
        assert entry.action is Action.BUY
        assert entry.stock_input == delta_input

    def test_result_computed_when_omitted(self, store, expensive_input):
        entry = store.create(expensive_input)
        assert entry.intrinsic_value == 37.0
        assert entry.action is Action.HOLD_AVOID

    def test_uncomputable_valuation_stored_as_null(self, store, delta_input):
        entry = store.create(delta_input.with_field('aaa_current_yield', 0))
        assert entry.intrinsic_value is None

        stored = json.loads(store.storage.get(store.key))
        assert stored[0]['intrinsicValue'] is None
        assert stored[0]['action'] == 'NONE'

    def test_timestamps_strictly_increase(self, store):
        first = store.create(_ticker('AAA'))
        second = store.create(_ticker('BBB'))
        assert second.ts > first.ts

    def test_timestamps_continue_after_loaded_entries(self, legacy_payload):
        store = WatchlistStore(MemoryStorage({'investor_watchlist': legacy_payload}),
                               clock=lambda: 1)
        entry = store.create(_ticker('NEW'))
        assert entry.ts == 1717000000001

    def test_every_create_is_persisted(self, store):
        store.create(_ticker('AAA'))
        assert len(decode_entries(store.storage.get(store.key))) == 1
        store.create(_ticker('BBB'))
        assert len(decode_entries(store.storage.get(store.key))) == 2


class TestUpdate:
    def test_replaces_in_place(self, store):
        store.create(_ticker('AAA'))
        store.create(_ticker('BBB'))

        store.update(0, _ticker('CCC', price=10))

        assert [entry.ticker for entry in store] == ['CCC', 'AAA']
        assert store[0].action is Action.BUY

    def test_update_last_position(self, store):
        store.create(_ticker('AAA'))
        store.create(_ticker('BBB'))

        store.update(1, _ticker('ZZZ'))

        assert [entry.ticker for entry in store] == ['BBB', 'ZZZ']
        persisted = decode_entries(store.storage.get(store.key))
        assert [entry.ticker for entry in persisted] == ['BBB', 'ZZZ']

    @pytest.mark.parametrize('index', [5, 2, -1])
    def test_out_of_range_raises(self, store, index):
        store.create(_ticker('AAA'))
        store.create(_ticker('BBB'))

        with pytest.raises(WatchlistIndexError) as exc_info:
            store.update(index, _ticker('CCC'))

        assert exc_info.value.index == index
        assert exc_info.value.size == 2
        assert [entry.ticker for entry in store] == ['BBB', 'AAA']

    def test_index_error_is_an_index_error(self, store):
        with pytest.raises(IndexError):
            store.update(0, _ticker('AAA'))


class TestDelete:
    def test_removes_entry(self, store):
        store.create(_ticker('AAA'))
        store.create(_ticker('BBB'))

        assert store.delete(0) is True
        assert [entry.ticker for entry in store] == ['AAA']
        assert len(decode_entries(store.storage.get(store.key))) == 1

    def test_empty_watchlist_does_not_raise(self, store):
        assert store.delete(0) is False
        assert len(store) == 0

    @pytest.mark.parametrize('index', [3, -1])
    def test_out_of_range_is_ignored(self, store, index):
        store.create(_ticker('AAA'))
        assert store.delete(index) is False
        assert len(store) == 1

    def test_deleting_edited_entry_ends_edit(self, store):
        store.create(_ticker('AAA'))
        store.create(_ticker('BBB'))
        store.begin_edit(1)

        store.delete(1)

        assert store.editing_index is None

    def test_deleting_earlier_entry_shifts_edit(self, store):
        store.create(_ticker('AAA'))
        store.create(_ticker('BBB'))
        store.create(_ticker('CCC'))
        store.begin_edit(2)  # AAA

        store.delete(0)
        store.submit(_ticker('AAA2'))

        assert [entry.ticker for entry in store] == ['BBB', 'AAA2']


# ---------------------------------------------------------------------------
# Editing mode
# ---------------------------------------------------------------------------

class TestEditing:
    def test_begin_edit_returns_inputs(self, store, delta_input):
        store.create(delta_input)

        loaded = store.begin_edit(0)

        assert loaded == delta_input
        assert store.editing_index == 0
        assert store.is_editing

    def test_begin_edit_invalid_index(self, store):
        store.create(_ticker('AAA'))
        store.begin_edit(0)

        assert store.begin_edit(4) is None
        assert store.editing_index == 0

    def test_cancel_edit(self, store):
        store.create(_ticker('AAA'))
        store.begin_edit(0)
        store.cancel_edit()

        assert store.editing_index is None
        assert [entry.ticker for entry in store] == ['AAA']

    def test_cancel_edit_when_not_editing(self, store):
        store.cancel_edit()
        store.cancel_edit()
        assert store.editing_index is None
        assert len(store) == 0

    def test_submit_creates_when_not_editing(self, store):
        store.submit(_ticker('AAA'))
        store.submit(_ticker('BBB'))
        assert [entry.ticker for entry in store] == ['BBB', 'AAA']

    def test_submit_updates_entry_under_edit(self, store):
        store.create(_ticker('AAA'))
        store.create(_ticker('BBB'))
        stock = store.begin_edit(1)

        store.submit(stock.with_field('price', 20))

        assert [entry.ticker for entry in store] == ['BBB', 'AAA']
        assert store[1].price == 20
        assert store.editing_index is None


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------

class TestPersistence:
    def test_round_trip_across_restart_file(self, tmp_path, delta_input, expensive_input):
        first = WatchlistStore(FileStorage(tmp_path / 'store'))
        first.create(delta_input)
        first.create(expensive_input.with_field('eps', '2.00 '))

        restarted = WatchlistStore(FileStorage(tmp_path / 'store'))

        assert restarted.entries == first.entries
        assert restarted[0].eps == '2.00 '

    def test_round_trip_across_restart_sqlite(self, tmp_path, delta_input):
        db_path = tmp_path / 'investor.db'
        first = WatchlistStore(SqliteStorage(db_path))
        first.create(delta_input)
        first.create(delta_input.with_field('ticker', 'DAL2'))
        first.delete(1)

        restarted = WatchlistStore(SqliteStorage(db_path))

        assert restarted.entries == first.entries
        assert [entry.ticker for entry in restarted] == ['DAL2']

    def test_encode_decode(self, delta_input):
        entry = WatchlistEntry.from_valuation(delta_input, evaluate(delta_input), ts=42)
        payload = encode_entries([entry])
        record = json.loads(payload)[0]

        assert set(record) == {
            'ticker', 'eps', 'growthPct', 'aaaCurrentYield', 'price', 'mosTargetPct',
            'intrinsicValue', 'acceptableBuyPrice', 'diffPct', 'action', 'ts',
        }
        assert decode_entries(payload) == [entry]

    def test_boolean_inputs_stored_as_missing(self, store):
        stock = StockInput(ticker='BOOL', eps=True, growth_pct=False, aaa_current_yield=4.4,
                           price=10, mos_target_pct=25)
        entry = store.create(stock)

        assert entry.eps is None
        assert entry.growth_pct is None
        store.reload()
        assert store[0].eps is None
        assert entry.intrinsic_value == 0.0
        assert evaluate(store[0].stock_input).intrinsic_value == entry.intrinsic_value

    def test_write_failure_keeps_memory_state(self, fixed_clock):
        store = WatchlistStore(FailingWriteStorage(), clock=fixed_clock)

        entry = store.create(_ticker('AAA'))

        assert store.entries == [entry]
        assert error_handler.last_error.context.operation == 'save'
        assert error_handler.last_error.category is ErrorCategory.PERSISTENCE

    def test_save_reports_failure(self):
        assert WatchlistStore(FailingWriteStorage()).save() is False
        assert WatchlistStore(MemoryStorage()).save() is True

    def test_save_explicit_sequence(self, store, delta_input):
        entry = WatchlistEntry.from_valuation(delta_input, evaluate(delta_input), ts=7)
        store.save([entry])
        assert store.load() == [entry]

    def test_reload(self, memory_storage, delta_input):
        store = WatchlistStore(memory_storage)
        other = WatchlistStore(memory_storage)
        other.create(delta_input)
        store.reload()
        store.begin_edit(0)
        other.create(delta_input.with_field('ticker', 'DAL2'))

        store.reload()

        assert [entry.ticker for entry in store] == ['DAL2', 'DAL']
        assert store.editing_index is None


class TestSingleton:
    def test_same_instance(self):
        config = AppConfig(storage={'backend': 'memory'})
        first = get_watchlist_store(config)
        assert get_watchlist_store() is first

    def test_reset(self):
        config = AppConfig(storage={'backend': 'memory'})
        first = get_watchlist_store(config)
        reset_watchlist_store()
        assert get_watchlist_store(config) is not first

    def test_built_from_config(self, tmp_path):
        config = AppConfig(storage={'backend': 'sqlite', 'path': str(tmp_path / 'wl.db'), 'key': 'mine'},
                           valuation={'round_decimals': 1})
        store = get_watchlist_store(config)

        assert isinstance(store.storage, SqliteStorage)
        assert store.key == 'mine'
        assert store.round_decimals == 1
