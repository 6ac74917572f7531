"""
Key-value storage backends for MeetingMaestro

A storage holds raw text values under string keys, the way a browser's
localStorage does. The meeting store keeps its whole collection under a
single key.
"""
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, Optional

from config.settings import Config

logger = logging.getLogger(__name__)

class StorageError(Exception):
    """Raised when the backing medium cannot be read or written"""


class KeyValueStorage:
    """Interface for key-value storage backends"""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class InMemoryStorage(KeyValueStorage):
    """Process-local storage, used for tests and throwaway runs"""

    def __init__(self, initial: Dict[str, str] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __repr__(self):
        return f"InMemoryStorage(keys={sorted(self._data)})"


class JsonFileStorage(KeyValueStorage):
    """
    Storage backed by a single JSON file mapping keys to text values.

    Every write replaces the file through a temporary file and ``os.replace``,
    so readers see either the old or the new content, never a partial write.
    The lock only serializes writers inside this process; separate processes
    sharing the file are not coordinated.
    """

    def __init__(self, path: str):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Cannot read storage file {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"Storage file {self.path} does not hold a JSON object")

        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=str(directory))
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StorageError(f"Cannot write storage file {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        if value is not None and not isinstance(value, str):
            raise StorageError(f"Value for key '{key}' is not text")
        return value

    def set(self, key: str, value: str) -> None:
        with self._lock:
            try:
                data = self._read_all()
            except StorageError as e:
                logger.warning(f"Replacing unreadable storage file: {e}")
                data = {}
            data[key] = value
            self._write_all(data)
        logger.debug(f"Stored {len(value)} characters under '{key}' in {self.path}")

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read_all()
            if key in data:
                del data[key]
                self._write_all(data)

    def __repr__(self):
        return f"JsonFileStorage(path='{self.path}')"


def create_storage(path: str) -> KeyValueStorage:
    """Build the storage backend named by configuration"""
    if not path or path == Config.MEMORY_STORAGE:
        logger.info("Using in-memory meeting storage")
        return InMemoryStorage()

    logger.info(f"Using JSON file meeting storage: {path}")
    return JsonFileStorage(path)
