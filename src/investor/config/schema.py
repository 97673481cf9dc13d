from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .constants import DISPLAY_CONFIG, WATCHLIST_DEFAULTS


class StorageBackendType(str, Enum):
    MEMORY = "memory"
    FILE = "file"
    SQLITE = "sqlite"


class StorageConfig(BaseModel):
    """Where the watchlist is persisted."""
    backend: StorageBackendType = StorageBackendType.FILE
    path: str = WATCHLIST_DEFAULTS.STORAGE_DIR   # Directory (file) or database file (sqlite)
    key: str = WATCHLIST_DEFAULTS.STORAGE_KEY    # Key holding the serialized watchlist


class ValuationSettings(BaseModel):
    """Snapshot and display settings for valuation results."""
    round_decimals: int = Field(default=WATCHLIST_DEFAULTS.ROUND_DECIMALS, ge=0, le=10)
    currency_symbol: str = DISPLAY_CONFIG.CURRENCY_SYMBOL


class LoggingSettings(BaseModel):
    """Logging setup passed to setup_logging."""
    level: str = "INFO"
    log_to_file: bool = False
    log_file_path: str = "logs/investor.log"
    structured: bool = False


class AppConfig(BaseModel):
    """Complete application configuration."""
    name: str = "investor_watchlist"
    description: Optional[str] = None

    storage: StorageConfig = StorageConfig()
    valuation: ValuationSettings = ValuationSettings()
    logging: LoggingSettings = LoggingSettings()

    # Clear the calculator form back to defaults after each save
    reset_form_on_save: bool = False
