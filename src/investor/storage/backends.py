"""
Durable Storage Backend Implementations

Key-value stores holding text values under string keys:
- MemoryStorage: in-process dictionary, nothing survives a restart
- FileStorage: one UTF-8 file per key inside a directory
- SqliteStorage: a single ``kv`` table in a local SQLite database

Each backend implements a common interface for consistency. Backends report
I/O failures as ``StorageError``; deciding whether a failure is fatal is up
to the caller.
"""

import hashlib
import os
import sqlite3
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from ..config.logging_config import get_logger
from ..exceptions import StorageError

logger = get_logger(__name__)


class StorageBackend(ABC):
    """Abstract base class for storage backends."""

    name = "abstract"

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get the text stored under key, or None if absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store text under key, replacing any previous value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete key. Returns True if key existed."""
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check if key exists."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove all stored keys."""
        pass


class MemoryStorage(StorageBackend):
    """In-memory storage, used for tests and throwaway sessions."""

    name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def exists(self, key: str) -> bool:
        return key in self._data

    def clear(self) -> None:
        self._data.clear()


class FileStorage(StorageBackend):
    """Persistent file-based storage."""

    name = "file"

    def __init__(self, storage_dir: str | Path = ".investor"):
        """
        Initialize file storage.

        Parameters
        ----------
        storage_dir : str or Path
            Directory holding one file per key; created on first write
        """
        self.storage_dir = Path(storage_dir)

    def get(self, key: str) -> Optional[str]:
        """Read the value for key from its file."""
        path = self._get_file(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(self.name, key, f"cannot read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        """Write the value atomically: temp file in the same directory, then replace."""
        path = self._get_file(key)
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.storage_dir, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise StorageError(self.name, key, f"cannot write {path}: {e}") from e

        logger.debug(f"Wrote {len(value)} characters to {path}")

    def delete(self, key: str) -> bool:
        path = self._get_file(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(self.name, key, f"cannot delete {path}: {e}") from e

    def exists(self, key: str) -> bool:
        return self._get_file(key).exists()

    def clear(self) -> None:
        if not self.storage_dir.exists():
            return
        try:
            for path in self.storage_dir.glob("*.json"):
                path.unlink()
        except OSError as e:
            raise StorageError(self.name, "*", f"cannot clear {self.storage_dir}: {e}") from e
        logger.info(f"File storage cleared: {self.storage_dir}")

    def _get_file(self, key: str) -> Path:
        """Get file path for key."""
        # Create a safe filename from the key
        key_hash = hashlib.md5(key.encode()).hexdigest()[:12]
        safe_key = "".join(c if c.isalnum() or c in "-_" else "_" for c in key)[:64]
        return self.storage_dir / f"{safe_key}-{key_hash}.json"


class SqliteStorage(StorageBackend):
    """Storage backed by a local SQLite database file."""

    name = "sqlite"

    def __init__(self, db_path: str | Path = ".investor/investor.db"):
        """
        Initialize SQLite storage.

        Parameters
        ----------
        db_path : str or Path
            Database file; parent directory and table are created on demand
        """
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.execute('CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)')
        return conn

    def _run(self, key: str, sql: str, params: tuple = ()) -> int:
        """Execute a write statement in its own transaction; returns the affected row count."""
        try:
            conn = self._connect()
        except (sqlite3.Error, OSError) as e:
            raise StorageError(self.name, key, f"cannot open {self.db_path}: {e}") from e
        try:
            with conn:
                return conn.execute(sql, params).rowcount
        except sqlite3.Error as e:
            raise StorageError(self.name, key, str(e)) from e
        finally:
            conn.close()

    def get(self, key: str) -> Optional[str]:
        try:
            conn = self._connect()
        except (sqlite3.Error, OSError) as e:
            raise StorageError(self.name, key, f"cannot open {self.db_path}: {e}") from e
        try:
            row = conn.execute('SELECT value FROM kv WHERE key = ?', (key,)).fetchone()
        except sqlite3.Error as e:
            raise StorageError(self.name, key, str(e)) from e
        finally:
            conn.close()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        self._run(key, 'INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)', (key, value))

    def delete(self, key: str) -> bool:
        return self._run(key, 'DELETE FROM kv WHERE key = ?', (key,)) > 0

    def exists(self, key: str) -> bool:
        return self.get(key) is not None

    def clear(self) -> None:
        self._run("*", 'DELETE FROM kv')
