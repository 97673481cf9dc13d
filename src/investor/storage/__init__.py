"""
Durable storage for the investor watchlist.

A key-value layer holding the serialized watchlist under a single string key.
"""

from pathlib import Path

from ..config.constants import WATCHLIST_DEFAULTS
from ..config.schema import StorageBackendType, StorageConfig
from .backends import FileStorage, MemoryStorage, SqliteStorage, StorageBackend


def create_storage(config: StorageConfig) -> StorageBackend:
    """Build the storage backend named in configuration."""
    if config.backend == StorageBackendType.MEMORY:
        return MemoryStorage()
    if config.backend == StorageBackendType.SQLITE:
        path = Path(config.path)
        if path.suffix == "":
            path = path / WATCHLIST_DEFAULTS.SQLITE_FILENAME
        return SqliteStorage(path)
    return FileStorage(config.path)


__all__ = [
    'StorageBackend',
    'MemoryStorage',
    'FileStorage',
    'SqliteStorage',
    'create_storage',
]
