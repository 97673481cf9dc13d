from pathlib import Path

import yaml
from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ConfigurationError
from .schema import AppConfig


def load_app_config(config_path: str | Path) -> AppConfig:
    """Load application configuration from YAML file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, 'r') as f:
        try:
            config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if config_data is None:
        config_data = {}
    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Configuration in {config_path} must be a mapping")

    try:
        return AppConfig(**config_data)
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}: {e}") from e


def get_default_config_path() -> Path:
    """Get path to default configuration file."""
    # Look for configs directory relative to this file
    current_dir = Path(__file__).parent
    project_root = current_dir.parent.parent.parent  # Go up to project root
    configs_dir = project_root / "configs"

    return configs_dir / "default.yaml"


def load_default_config() -> AppConfig:
    """Load the bundled default configuration, or built-in defaults if absent."""
    config_path = get_default_config_path()
    if not config_path.exists():
        return AppConfig()
    return load_app_config(config_path)


def create_example_config(output_path: str | Path) -> None:
    """Create an example configuration file."""
    example_config = {
        'name': 'example_watchlist',
        'description': 'Example configuration showing all available options',
        'storage': {
            'backend': 'file',
            'path': '.investor',
            'key': 'investor_watchlist',
        },
        'valuation': {
            'round_decimals': 2,
            'currency_symbol': '$',
        },
        'logging': {
            'level': 'INFO',
            'log_to_file': False,
            'log_file_path': 'logs/investor.log',
            'structured': False,
        },
        'reset_form_on_save': False,
    }

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        yaml.dump(example_config, f, default_flow_style=False, indent=2)
