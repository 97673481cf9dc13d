"""Tests for configuration loading and logging setup."""

import json
import logging
import sys
from pathlib import Path

import pytest
import yaml

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from investor.config.constants import VALUATION_DEFAULTS, get_config_summary  # noqa: E402
from investor.config.loader import (  # noqa: E402
    create_example_config,
    get_default_config_path,
    load_app_config,
    load_default_config,
)
from investor.config.logging_config import (  # noqa: E402
    StructuredFormatter,
    get_logger,
    get_logging_config,
)
from investor.config.schema import AppConfig, StorageBackendType  # noqa: E402
from investor.exceptions import ConfigurationError  # noqa: E402


class TestAppConfig:
    def test_defaults(self):
        config = AppConfig()
        assert config.storage.backend is StorageBackendType.FILE
        assert config.storage.key == 'investor_watchlist'
        assert config.valuation.round_decimals == 2
        assert config.reset_form_on_save is False

    def test_rejects_unknown_backend(self):
        with pytest.raises(ValueError):
            AppConfig(storage={'backend': 'redis'})


class TestLoader:
    def test_load_yaml(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text(yaml.dump({
            'name': 'test_config',
            'storage': {'backend': 'sqlite', 'path': 'data/wl.db'},
            'reset_form_on_save': True,
        }))

        config = load_app_config(path)

        assert config.name == 'test_config'
        assert config.storage.backend is StorageBackendType.SQLITE
        assert config.storage.key == 'investor_watchlist'
        assert config.reset_form_on_save is True

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / 'empty.yaml'
        path.write_text('')
        assert load_app_config(path) == AppConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_app_config(tmp_path / 'nope.yaml')

    @pytest.mark.parametrize('content', [
        'storage: [unclosed',
        '- just\n- a list\n',
        'valuation:\n  round_decimals: lots\n',
    ])
    def test_invalid_contents(self, tmp_path, content):
        path = tmp_path / 'bad.yaml'
        path.write_text(content)
        with pytest.raises(ConfigurationError):
            load_app_config(path)

    def test_example_config_loads(self, tmp_path):
        path = tmp_path / 'configs' / 'example.yaml'
        create_example_config(path)

        config = load_app_config(path)

        assert config.name == 'example_watchlist'
        assert config.storage.backend is StorageBackendType.FILE

    def test_bundled_default_config(self):
        assert get_default_config_path().name == 'default.yaml'
        config = load_default_config()
        assert config.storage.key == 'investor_watchlist'

    def test_constants_summary(self):
        summary = get_config_summary()
        assert summary['valuation_defaults']['FALLBACK_AAA_YIELD'] == 4.8
        assert VALUATION_DEFAULTS.HISTORICAL_AAA_YIELD == 4.4


class TestLogging:
    def test_console_only_config(self):
        config = get_logging_config('INFO', False, 'logs/x.log', False)
        assert set(config['handlers']) == {'console'}
        assert config['loggers']['investor']['handlers'] == ['console']

    def test_file_and_structured_handlers(self, tmp_path):
        log_file = str(tmp_path / 'investor.log')
        config = get_logging_config('DEBUG', True, log_file, True)

        assert set(config['handlers']) == {'console', 'file', 'structured_file'}
        assert config['handlers']['structured_file']['filename'].endswith('investor_structured.log')

    def test_get_logger_namespacing(self):
        assert get_logger('session').name == 'investor.session'
        assert get_logger('investor.watchlist.store').name == 'investor.watchlist.store'

    def test_structured_formatter_includes_extra(self):
        record = logging.LogRecord(
            name='investor.test', level=logging.INFO, pathname=__file__, lineno=1,
            msg='Watchlist %s', args=('create',), exc_info=None,
        )
        record.ticker = 'DAL'

        entry = json.loads(StructuredFormatter().format(record))

        assert entry['message'] == 'Watchlist create'
        assert entry['level'] == 'INFO'
        assert entry['extra'] == {'ticker': 'DAL'}
