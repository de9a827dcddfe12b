"""
PesaDB Key-Value Stores
=======================
The storage engine persists through a string key -> string value store, the
same contract as a browser's localStorage.

Stores:
  - MemoryStore: dict-backed, lives as long as the process
  - DirectoryStore: one file per key inside a data directory

Atomic write strategy (DirectoryStore):
  1. Write to <key>.json.tmp, flush + fsync
  2. os.replace(tmp, <key>.json), atomic on POSIX, near-atomic on Windows
"""

import os
import re
from abc import ABC, abstractmethod
from typing import Dict, Optional

from pesadb.errors import StorageError


class KeyValueStore(ABC):
    """String key -> string value persistence."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. No-op if absent."""
        pass


class MemoryStore(KeyValueStore):

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: str) -> bool:
        return key in self._data


_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.\-]+$")


class DirectoryStore(KeyValueStore):
    """
    Persists each key as <data_dir>/<key>.json.
    Keys are restricted to filename-safe characters; anything else raises
    StorageError.
    """

    SUFFIX = ".json"

    def __init__(self, data_dir: str):
        self._data_dir = os.path.abspath(data_dir)
        os.makedirs(self._data_dir, exist_ok=True)

    @property
    def data_dir(self) -> str:
        return self._data_dir

    def _path(self, key: str) -> str:
        if not _SAFE_KEY.match(key):
            raise StorageError(
                f"Storage key {key!r} may only contain letters, digits, '_', '.' and '-'."
            )
        return os.path.join(self._data_dir, key + self.SUFFIX)

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(value)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)

    def delete(self, key: str) -> None:
        path = self._path(key)
        if os.path.exists(path):
            os.remove(path)
